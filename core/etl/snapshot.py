"""
In-memory store for the last ETL run's retrieved open positions.

Written by the ETL process after each successful run, read by the API
(GET /api/open-positions/last-retrieved) and the WhatsApp sender.
Snapshots are immutable; set() swaps the reference, so a reader always sees
either the previous snapshot or the new one in full.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

from core.etl.models import OpenPositionCreate


@dataclass(frozen=True)
class LastRetrievedSnapshot:
    retrieved_at: datetime
    extracted: int
    transformed: int
    created: int
    skipped: int
    positions: Tuple[OpenPositionCreate, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {
            "retrievedAt": self.retrieved_at.isoformat(timespec="milliseconds"),
            "extracted": self.extracted,
            "transformed": self.transformed,
            "created": self.created,
            "skipped": self.skipped,
            "positions": [p.model_dump(by_alias=True) for p in self.positions],
        }


class SnapshotStore:
    """Last-write-wins holder for one LastRetrievedSnapshot."""

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[LastRetrievedSnapshot] = None

    def get(self) -> Optional[LastRetrievedSnapshot]:
        """None until the first successful ETL run."""
        with self._lock:
            return self._snapshot

    def set(self, snapshot: LastRetrievedSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None


last_retrieved_store = SnapshotStore()


def get_last_retrieved() -> Optional[LastRetrievedSnapshot]:
    return last_retrieved_store.get()


def set_last_retrieved(snapshot: LastRetrievedSnapshot) -> None:
    last_retrieved_store.set(snapshot)


__all__ = [
    "LastRetrievedSnapshot",
    "SnapshotStore",
    "last_retrieved_store",
    "get_last_retrieved",
    "set_last_retrieved",
]
