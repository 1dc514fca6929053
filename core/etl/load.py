"""
Load phase: persist transformed open positions.

Records already stored under the same link are skipped, so repeated ETL runs
never duplicate a posting.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable

from psycopg import errors as pg_errors

from core.db import positions as position_store
from core.etl.models import OpenPositionCreate

log = logging.getLogger("etl.load")


@dataclass
class LoadResult:
    created: int = 0
    skipped: int = 0


class LoadError(RuntimeError):
    """A store call failed mid-batch. Carries the counts completed before the failure."""

    def __init__(self, message: str, created: int, skipped: int):
        super().__init__(message)
        self.created = created
        self.skipped = skipped


async def load_open_positions(
    records: Iterable[OpenPositionCreate],
    store=position_store,
) -> LoadResult:
    """
    Insert each record unless a row with the same link already exists.

    Records are processed one at a time, in order: the lookup for record N+1
    only starts after record N has been written. A unique-constraint conflict
    on insert (another writer stored the link first) counts as skipped.
    Any other store failure aborts the batch with LoadError.
    """
    result = LoadResult()

    for record in records:
        try:
            existing = await asyncio.to_thread(store.get_open_position_by_link, record.link)
            if existing:
                result.skipped += 1
                continue
            try:
                await asyncio.to_thread(store.create_open_position, record)
            except pg_errors.UniqueViolation:
                result.skipped += 1
                continue
            result.created += 1
        except Exception as exc:
            log.warning(
                "Load aborted at link=%s after created=%d skipped=%d: %s",
                record.link,
                result.created,
                result.skipped,
                exc,
            )
            raise LoadError(str(exc) or exc.__class__.__name__, result.created, result.skipped) from exc

    return result


__all__ = ["LoadResult", "LoadError", "load_open_positions"]
