import asyncio
import logging
import os

from dotenv import load_dotenv

from core.db.schema import init_db
from worker.scheduler import Scheduler

# Load `.env` for local/dev runs (override=True so updates take effect after restart).
load_dotenv(override=True)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("worker")


async def main():
    init_db()
    log.info("Worker starting")
    await Scheduler().run_forever()


if __name__ == "__main__":
    asyncio.run(main())
