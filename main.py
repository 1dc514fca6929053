"""
Entry point to run the background worker (ETL + WhatsApp, without the API).
"""
import asyncio

from worker.main import main as worker_main


if __name__ == "__main__":
    asyncio.run(worker_main())
