"""
JSON shapes shared by the API routes.
"""
from __future__ import annotations

from typing import Dict, Mapping

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

_REASONS = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    429: "Too Many Requests",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        {
            "statusCode": status_code,
            "error": _REASONS.get(status_code, "Error"),
            "message": message,
        },
        status_code=status_code,
    )


def position_to_json(row: Mapping) -> Dict:
    """DB row (snake_case) -> API shape (camelCase)."""
    data = {
        "id": row.get("id"),
        "title": row.get("title"),
        "link": row.get("link"),
        "companyName": row.get("company_name"),
        "region": row.get("region"),
        "createdAt": row.get("created_at"),
        "updatedAt": row.get("updated_at"),
    }
    if "original_id" in row:
        data["originalId"] = row.get("original_id")
        data["deletedAt"] = row.get("deleted_at")
    return jsonable_encoder(data)


__all__ = ["error_response", "position_to_json"]
