import asyncio

from fastapi import APIRouter, Query, Request

from app.responses import error_response, position_to_json
from app.security import admin_key_configured, validate_admin_key
from core.db.positions import cold_delete_open_position, get_cold_deleted_positions
from core.etl.process import ALREADY_IN_PROGRESS, etl_process

router = APIRouter(prefix="/api/admin")


def _admin_denied(request: Request):
    """Returns an error response when the caller is not an admin, else None."""
    if not admin_key_configured():
        return error_response(503, "Admin API is disabled: ADMIN_API_KEY is not set")
    if not validate_admin_key(request):
        return error_response(403, "Invalid or missing X-Admin-Key")
    return None


@router.post("/etl/run")
async def run_etl(request: Request):
    denied = _admin_denied(request)
    if denied:
        return denied
    result = await etl_process.run_once()
    if result.error == ALREADY_IN_PROGRESS:
        return error_response(409, ALREADY_IN_PROGRESS)
    return result.to_dict()


@router.delete("/open-positions/{position_id}")
async def cold_delete(request: Request, position_id: str):
    denied = _admin_denied(request)
    if denied:
        return denied
    tombstone = await asyncio.to_thread(cold_delete_open_position, position_id)
    if not tombstone:
        return error_response(404, "Open position not found")
    return position_to_json(tombstone)


@router.get("/cold-deleted")
def list_cold_deleted(request: Request, limit: int = Query(100, ge=1, le=500)):
    denied = _admin_denied(request)
    if denied:
        return denied
    return {"data": [position_to_json(row) for row in get_cold_deleted_positions(limit=limit)]}
