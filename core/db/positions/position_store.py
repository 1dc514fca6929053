"""
Open position storage helpers.

`link` is the natural key of an open position: the table carries a UNIQUE
constraint on it and the ETL loader looks rows up by link before inserting.
Removing a position goes through cold_delete_open_position(), which moves the
row into cold_deleted instead of dropping it.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional

from core.db.base import get_conn

log = logging.getLogger("db")

_COLUMNS = "id, title, link, company_name, region, created_at, updated_at"
_UPDATABLE = ("title", "link", "company_name", "region")

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


def _fields(data) -> Dict:
    """Accept a pydantic model or a plain mapping."""
    if hasattr(data, "model_dump"):
        return data.model_dump()
    return dict(data)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_open_position(data) -> Dict:
    """Insert a new open position and return the stored row."""
    fields = _fields(data)
    now = _now()

    conn = get_conn()
    cur = conn.cursor()
    try:
        # Raises psycopg.errors.UniqueViolation when the link is already stored.
        cur.execute(
            f"""
            INSERT INTO open_position (id, title, link, company_name, region, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            RETURNING {_COLUMNS}
            """,
            (
                str(uuid.uuid4()),
                fields["title"],
                fields["link"],
                fields["company_name"],
                fields["region"],
                now,
                now,
            ),
        )
        row = cur.fetchone()
        conn.commit()
    finally:
        conn.close()
    return dict(row)


def get_open_position_by_link(link: str) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT {_COLUMNS} FROM open_position WHERE link = ?", (link,))
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_open_position_by_id(position_id: str) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT {_COLUMNS} FROM open_position WHERE id = ?", (position_id,))
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_open_positions_created_in_last_hours(hours: float) -> List[Dict]:
    """Return positions created within the last `hours`, newest first."""
    cutoff = _now() - timedelta(hours=hours)

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {_COLUMNS}
        FROM open_position
        WHERE created_at >= ?
        ORDER BY created_at DESC, id DESC
        """,
        (cutoff,),
    )
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_all_open_positions(
    *,
    company_name: Optional[str] = None,
    region: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> Dict:
    """
    List open positions with optional case-insensitive filters.
    `search` matches either the title or the company name.
    Returns {"data", "total", "limit", "offset"}.
    """
    limit = max(1, min(int(limit), MAX_LIMIT))
    offset = max(0, int(offset))

    clauses: List[str] = []
    params: List = []
    if company_name:
        clauses.append("company_name ILIKE ?")
        params.append(f"%{company_name}%")
    if region:
        clauses.append("region ILIKE ?")
        params.append(f"%{region}%")
    if search:
        clauses.append("(title ILIKE ? OR company_name ILIKE ?)")
        params.extend([f"%{search}%", f"%{search}%"])
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {_COLUMNS}
        FROM open_position
        {where}
        ORDER BY created_at DESC, id DESC
        LIMIT ? OFFSET ?
        """,
        (*params, limit, offset),
    )
    rows = cur.fetchall()
    cur.execute(f"SELECT COUNT(*) AS count FROM open_position {where}", tuple(params))
    count_row = cur.fetchone()
    conn.close()

    return {
        "data": [dict(r) for r in rows],
        "total": count_row["count"] if count_row else 0,
        "limit": limit,
        "offset": offset,
    }


def update_open_position(position_id: str, changes: Mapping) -> Optional[Dict]:
    """Apply the given field changes. Returns the updated row, or None if missing."""
    fields = {k: v for k, v in _fields(changes).items() if k in _UPDATABLE and v is not None}
    if not fields:
        return get_open_position_by_id(position_id)

    assignments = ", ".join(f"{name} = ?" for name in fields)
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        UPDATE open_position
        SET {assignments}, updated_at = ?
        WHERE id = ?
        RETURNING {_COLUMNS}
        """,
        (*fields.values(), _now(), position_id),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return dict(row) if row else None


def delete_open_position(position_id: str) -> Optional[Dict]:
    """Hard delete. Prefer cold_delete_open_position() for anything user-facing."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"DELETE FROM open_position WHERE id = ? RETURNING {_COLUMNS}",
        (position_id,),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return dict(row) if row else None


def cold_delete_open_position(position_id: str) -> Optional[Dict]:
    """
    Move a position into cold_deleted (tombstone with deleted_at) and remove it
    from open_position in a single transaction. Original timestamps are kept.
    Returns the tombstone row, or None if the position does not exist.
    """
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            f"SELECT {_COLUMNS} FROM open_position WHERE id = ? FOR UPDATE",
            (position_id,),
        )
        existing = cur.fetchone()
        if not existing:
            conn.rollback()
            return None

        cur.execute(
            """
            INSERT INTO cold_deleted
              (id, original_id, title, link, company_name, region, created_at, updated_at, deleted_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING id, original_id, title, link, company_name, region,
                      created_at, updated_at, deleted_at
            """,
            (
                str(uuid.uuid4()),
                existing["id"],
                existing["title"],
                existing["link"],
                existing["company_name"],
                existing["region"],
                existing["created_at"],
                existing["updated_at"],
                _now(),
            ),
        )
        tombstone = cur.fetchone()
        cur.execute("DELETE FROM open_position WHERE id = ?", (position_id,))
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

    log.info("Cold-deleted open position id=%s link=%s", position_id, existing["link"])
    return dict(tombstone)


def get_cold_deleted_positions(limit: int = 100) -> List[Dict]:
    """Return recently cold-deleted positions (archive view)."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, original_id, title, link, company_name, region,
               created_at, updated_at, deleted_at
        FROM cold_deleted
        ORDER BY deleted_at DESC, id DESC
        LIMIT ?
        """,
        (int(limit),),
    )
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


__all__ = [
    "create_open_position",
    "get_open_position_by_link",
    "get_open_position_by_id",
    "get_open_positions_created_in_last_hours",
    "get_all_open_positions",
    "update_open_position",
    "delete_open_position",
    "cold_delete_open_position",
    "get_cold_deleted_positions",
]
