"""
Quick helper to run a query against Postgres (DATABASE_URL required).

Usage:
  DATABASE_URL=... python -m scripts.db_shell                                          # latest open positions
  DATABASE_URL=... python -m scripts.db_shell "SELECT * FROM cold_deleted LIMIT 5"    # run a custom query
"""
from __future__ import annotations

import sys

import psycopg
from psycopg.rows import dict_row

from core.db.base import resolve_database_url

DEFAULT_QUERY = (
    "SELECT id, title, company_name, region, created_at "
    "FROM open_position ORDER BY created_at DESC LIMIT 20"
)


def main() -> None:
    query = " ".join(sys.argv[1:]).strip() or DEFAULT_QUERY

    try:
        url = resolve_database_url()
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc
    print("Using DB: postgres (DATABASE_URL)", file=sys.stderr)

    try:
        with psycopg.connect(url, row_factory=dict_row) as conn:
            cur = conn.cursor()
            cur.execute(query)
            if cur.description is not None:
                for row in cur.fetchall():
                    print(dict(row))
            else:
                conn.commit()
                print(f"OK ({cur.rowcount} row(s) affected)")
    except Exception as exc:
        raise SystemExit(f"Error running query: {exc}") from exc


if __name__ == "__main__":
    main()
