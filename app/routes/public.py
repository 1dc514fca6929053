from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query

from app.responses import error_response, position_to_json
from core.db.positions import get_all_open_positions, get_open_position_by_id
from core.etl.snapshot import get_last_retrieved

router = APIRouter(prefix="/api")

NO_SNAPSHOT_YET = "No ETL run has completed yet. Last retrieved open positions are not available."


@router.get("/health")
def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
    }


@router.get("/open-positions/last-retrieved")
def last_retrieved():
    """Last batch retrieved by the ETL, with run counts. 404 before the first successful run."""
    snapshot = get_last_retrieved()
    if snapshot is None:
        return error_response(404, NO_SNAPSHOT_YET)
    return snapshot.to_dict()


@router.get("/open-positions")
def list_open_positions(
    company_name: Optional[str] = Query(None, alias="companyName", max_length=200),
    region: Optional[str] = Query(None, max_length=200),
    search: Optional[str] = Query(None, max_length=200),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    page = get_all_open_positions(
        company_name=company_name,
        region=region,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {
        "data": [position_to_json(row) for row in page["data"]],
        "total": page["total"],
        "limit": page["limit"],
        "offset": page["offset"],
    }


@router.get("/open-positions/{position_id}")
def get_open_position(position_id: str):
    row = get_open_position_by_id(position_id)
    if not row:
        return error_response(404, "Open position not found")
    return position_to_json(row)
