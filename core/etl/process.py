"""
ETL process: LinkedIn extract -> transform -> load -> last-retrieved snapshot.

Runs on startup and on every scheduler tick. Only one run executes at a
time: a call made while another run is in flight returns immediately with
ALREADY_IN_PROGRESS instead of waiting for it. Missed runs are never queued.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from core.etl.extract import find_linkedin_jobs
from core.etl.load import LoadError, load_open_positions
from core.etl.models import EtlProcessResult
from core.etl.snapshot import LastRetrievedSnapshot, SnapshotStore, last_retrieved_store
from core.etl.transform import transform_linkedin_jobs

ALREADY_IN_PROGRESS = "ETL already in progress"

log = logging.getLogger("etl")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EtlProcess:
    def __init__(
        self,
        *,
        extract=find_linkedin_jobs,
        transform=transform_linkedin_jobs,
        load=load_open_positions,
        snapshot_store: Optional[SnapshotStore] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._extract = extract
        self._transform = transform
        self._load = load
        self._snapshot_store = snapshot_store or last_retrieved_store
        self._clock = clock
        # Non-blocking acquire is the test-and-set: losers skip, they never wait.
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        return self._guard.locked()

    async def run_once(self) -> EtlProcessResult:
        """
        Run the pipeline once. Never raises; failures are reported in
        result.error. The snapshot is only replaced when every stage succeeded.
        """
        if not self._guard.acquire(blocking=False):
            return EtlProcessResult(error=ALREADY_IN_PROGRESS)

        result = EtlProcessResult()
        try:
            extracted = await self._extract()
            result.extracted = len(extracted)

            transformed = self._transform(extracted)
            result.transformed = len(transformed)

            loaded = await self._load(transformed)
            result.created = loaded.created
            result.skipped = loaded.skipped

            self._snapshot_store.set(
                LastRetrievedSnapshot(
                    retrieved_at=self._clock(),
                    extracted=result.extracted,
                    transformed=result.transformed,
                    created=result.created,
                    skipped=result.skipped,
                    positions=tuple(transformed),
                )
            )
        except LoadError as exc:
            result.created = exc.created
            result.skipped = exc.skipped
            result.error = str(exc)
        except Exception as exc:
            log.exception("ETL run failed")
            result.error = str(exc) or exc.__class__.__name__
        finally:
            self._guard.release()

        return result


etl_process = EtlProcess()


async def run_linkedin_etl_process() -> EtlProcessResult:
    return await etl_process.run_once()


__all__ = [
    "ALREADY_IN_PROGRESS",
    "EtlProcess",
    "etl_process",
    "run_linkedin_etl_process",
]
