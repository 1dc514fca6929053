"""
Run the LinkedIn ETL once and print the result (no WhatsApp send).

Usage:
  python -m scripts.run_etl_once             # extract + transform + load
  python -m scripts.run_etl_once --dry-run   # extract + transform only, print positions
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from core.etl.extract import find_linkedin_jobs
from core.etl.process import run_linkedin_etl_process
from core.etl.transform import transform_linkedin_jobs


async def _dry_run() -> None:
    positions = transform_linkedin_jobs(await find_linkedin_jobs())
    for p in positions:
        print(json.dumps(p.model_dump(by_alias=True), ensure_ascii=False))
    print(f"{len(positions)} position(s)")


async def _run() -> None:
    from core.db.schema import init_db

    init_db()
    result = await run_linkedin_etl_process()
    print(json.dumps(result.to_dict()))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="Do not touch the database")
    args = parser.parse_args()

    load_dotenv(override=True)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    asyncio.run(_dry_run() if args.dry_run else _run())


if __name__ == "__main__":
    main()
