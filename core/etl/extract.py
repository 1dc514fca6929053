"""
LinkedIn job search scraper (public guest search, no auth).

Output is a list of RawJob for the transform phase. Fetch failures are not
fatal: they are logged and produce an empty list.
"""
from __future__ import annotations

import logging
import os
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from core.etl.models import RawJob

LINKEDIN_JOBS_URL = (
    "https://www.linkedin.com/jobs/search?keywords=Desenvolvedor"
    "&location=Sorocaba%2C%20S%C3%A3o%20Paulo%2C%20Brasil&geoId=100218040"
    "&distance=25&f_TPR=r604800&position=1&pageNum=0"
)
LINKEDIN_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/107.0.0.0 Safari/537.36"
    ),
}
FETCH_TIMEOUT_SECONDS = float(os.getenv("LINKEDIN_TIMEOUT_SECONDS", "15"))

log = logging.getLogger("etl.extract")


def _text(card, selector: str) -> str:
    tag = card.select_one(selector)
    return tag.get_text(strip=True) if tag else ""


def parse_linkedin_jobs(html: str) -> List[RawJob]:
    """
    Parse job cards out of a LinkedIn search results page.
    Cards missing a title, company or link are skipped; location is optional.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    jobs: List[RawJob] = []

    for card in soup.select("div.base-card"):
        title = _text(card, "h3.base-search-card__title")
        company = _text(card, "h4.base-search-card__subtitle")
        link_tag = card.select_one("a.base-card__full-link")
        href = (link_tag.get("href") or "").strip() if link_tag else ""
        if not title or not company or not href:
            continue

        location = _text(card, "span.job-search-card__location")
        jobs.append(
            RawJob(
                title=title,
                company=company,
                link=href.split("?")[0],
                location=location or None,
            )
        )

    return jobs


async def find_linkedin_jobs(
    *,
    url: str = LINKEDIN_JOBS_URL,
    timeout: float = FETCH_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
) -> List[RawJob]:
    """
    Fetch the LinkedIn search page once and parse it.
    Returns [] on network errors, timeouts and non-2xx responses.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(
                headers=LINKEDIN_HEADERS, timeout=timeout, follow_redirects=True
            ) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url, headers=LINKEDIN_HEADERS, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        log.warning("LinkedIn fetch failed: HTTP %s", exc.response.status_code)
        return []
    except httpx.HTTPError as exc:
        log.warning("LinkedIn fetch failed: %r", exc)
        return []

    jobs = parse_linkedin_jobs(response.text)
    log.info("Parsed %d job card(s) from LinkedIn", len(jobs))
    return jobs


__all__ = [
    "LINKEDIN_JOBS_URL",
    "LINKEDIN_HEADERS",
    "parse_linkedin_jobs",
    "find_linkedin_jobs",
]
