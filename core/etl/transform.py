"""
Transform scraped LinkedIn jobs into open_position-ready records.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

from pydantic import ValidationError

from core.etl.models import (
    COMPANY_NAME_MAX,
    REGION_MAX,
    TITLE_MAX,
    OpenPositionCreate,
    RawJob,
)

DEFAULT_REGION = "Não informada"

log = logging.getLogger("etl.transform")


def _field(job, name: str) -> Optional[str]:
    """Read a field from a RawJob or a plain dict; anything but a string counts as missing."""
    value = job.get(name) if isinstance(job, Mapping) else getattr(job, name, None)
    return value if isinstance(value, str) else None


def _trim_and_truncate(value: Optional[str], max_len: int) -> str:
    return (value or "").strip()[:max_len]


def transform_linkedin_jobs(extracted: Iterable[RawJob]) -> List[OpenPositionCreate]:
    """
    Trim, truncate and validate each scraped job. Invalid entries (empty
    required fields, bad URL, length bounds) are dropped; order is kept.
    Never raises.
    """
    result: List[OpenPositionCreate] = []

    for job in extracted or []:
        title = _trim_and_truncate(_field(job, "title"), TITLE_MAX)
        company_name = _trim_and_truncate(_field(job, "company"), COMPANY_NAME_MAX)
        link = (_field(job, "link") or "").strip()
        region = _trim_and_truncate(_field(job, "location"), REGION_MAX) or DEFAULT_REGION

        if not title or not company_name or not link:
            continue

        try:
            position = OpenPositionCreate(
                title=title,
                link=link,
                company_name=company_name,
                region=region,
            )
        except ValidationError:
            log.debug("Dropping invalid job link=%s", link)
            continue
        result.append(position)

    return result


__all__ = ["DEFAULT_REGION", "transform_linkedin_jobs"]
