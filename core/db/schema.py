"""
Schema and migration helpers for Postgres.
"""
from __future__ import annotations

import logging

from core.db.base import get_conn

log = logging.getLogger("db")


def init_db() -> None:
    """Create the open_position and cold_deleted tables if they don't exist."""
    conn = get_conn()
    cur = conn.cursor()

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS open_position(
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            link TEXT NOT NULL UNIQUE,
            company_name TEXT NOT NULL,
            region TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )
    cur.execute(
        """
        CREATE INDEX IF NOT EXISTS open_position_created_at_idx
        ON open_position (created_at)
        """
    )
    # Tombstones keep the original timestamps of the removed row.
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS cold_deleted(
            id TEXT PRIMARY KEY,
            original_id TEXT NOT NULL,
            title TEXT NOT NULL,
            link TEXT NOT NULL,
            company_name TEXT NOT NULL,
            region TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL,
            deleted_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )

    conn.commit()
    conn.close()
    log.info("Schema ready (open_position, cold_deleted)")


__all__ = ["init_db"]
