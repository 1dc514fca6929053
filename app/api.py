import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from dotenv import load_dotenv

from app.routes import admin, public, whatsapp
from core.db.schema import init_db
from worker.scheduler import Scheduler

# Ensure .env values are loaded even if uvicorn is launched without `dotenv run`.
# Use override=True so editing `.env` (and restarting uvicorn) reliably takes effect even if
# older values exist in the environment from a previous shell/session.
load_dotenv(override=True)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("api")


def scheduler_enabled() -> bool:
    return (os.getenv("RUN_SCHEDULER") or "true").strip().lower() not in ("0", "false", "no", "off")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    scheduler = None
    if scheduler_enabled():
        scheduler = Scheduler()
        scheduler.start()
    else:
        log.info("RUN_SCHEDULER is off; ETL only runs via POST /api/admin/etl/run")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()


app = FastAPI(title="vagas-bot", lifespan=lifespan)


app.include_router(public.router)
app.include_router(whatsapp.router)
app.include_router(admin.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3000")))
