import asyncio
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from app.responses import error_response
from app.security import allow_request, client_ip
from channels.whatsapp.client import to_jid
from channels.whatsapp.config import load_whatsapp_config
from channels.whatsapp.notifier import notifier
from core.db.positions import get_open_positions_created_in_last_hours
from core.etl.snapshot import get_last_retrieved

router = APIRouter(prefix="/api/whatsapp")

# -------- CONFIG --------
SEND_RATE_LIMIT = 5
SEND_RATE_WINDOW_SECONDS = 60
LAST_12H_HOURS = 12
LAST_12H_LABEL = "Last 12h open positions (DB)"
# ------------------------

MISSING_TARGET = "Missing target. Provide body.to (e.g. 5511999999999) or set WHATSAPP_TARGET_JID."


class SendOpenPositionsBody(BaseModel):
    to: Optional[str] = None


def _resolve_target(body: Optional[SendOpenPositionsBody]) -> str:
    to = body.to if body is not None else None
    if to is None:
        to = load_whatsapp_config().target_jid
    return to_jid(to)


def _send_response(result):
    if result.sent:
        return {"ok": True, "message": result.message}
    message = result.error or result.message or "Failed to send to WhatsApp."
    return error_response(504 if result.timed_out else 503, message)


def _rate_limited(request: Request) -> bool:
    key = f"whatsapp-send:{client_ip(request)}"
    return not allow_request(key, limit=SEND_RATE_LIMIT, window_seconds=SEND_RATE_WINDOW_SECONDS)


@router.post("/send-open-positions")
async def send_open_positions(request: Request, body: Optional[SendOpenPositionsBody] = None):
    """Send the last retrieved open positions (in-memory snapshot) to a WhatsApp number or group."""
    if _rate_limited(request):
        return error_response(429, "Too many send requests. Please wait a minute and try again.")
    jid = _resolve_target(body)
    if not jid:
        return error_response(400, MISSING_TARGET)

    result = await notifier.send_last_retrieved(jid, get_last_retrieved())
    return _send_response(result)


@router.post("/send-open-positions-last-12h")
async def send_open_positions_last_12h(request: Request, body: Optional[SendOpenPositionsBody] = None):
    """Send open positions created in the last 12 hours (from the DB)."""
    if _rate_limited(request):
        return error_response(429, "Too many send requests. Please wait a minute and try again.")
    jid = _resolve_target(body)
    if not jid:
        return error_response(400, MISSING_TARGET)

    positions = await asyncio.to_thread(get_open_positions_created_in_last_hours, LAST_12H_HOURS)
    result = await notifier.send_positions_list(jid, positions, LAST_12H_LABEL)
    return _send_response(result)
