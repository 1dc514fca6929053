"""
Records passed between the ETL stages.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX = 500
COMPANY_NAME_MAX = 200
REGION_MAX = 200


@dataclass(frozen=True)
class RawJob:
    """One job card as scraped; lives only for the duration of a run."""

    title: str
    company: str
    link: str
    location: Optional[str] = None


class OpenPositionCreate(BaseModel):
    """A validated open position, ready to be persisted."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX)
    link: str = Field(min_length=1)
    company_name: str = Field(
        min_length=1, max_length=COMPANY_NAME_MAX, serialization_alias="companyName"
    )
    region: str = Field(min_length=1, max_length=REGION_MAX)

    @field_validator("link")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc or " " in value:
            raise ValueError("link must be an absolute http(s) URL")
        return value


@dataclass
class EtlProcessResult:
    extracted: int = 0
    transformed: int = 0
    created: int = 0
    skipped: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        data = asdict(self)
        if data["error"] is None:
            data.pop("error")
        return data


__all__ = [
    "TITLE_MAX",
    "COMPANY_NAME_MAX",
    "REGION_MAX",
    "RawJob",
    "OpenPositionCreate",
    "EtlProcessResult",
]
