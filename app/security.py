"""
Admin key check + rate limit helpers.
"""
from __future__ import annotations

import hmac
import os
import time
from typing import Dict

ADMIN_HEADER = "X-Admin-Key"


def admin_key_configured() -> bool:
    return bool(os.getenv("ADMIN_API_KEY"))


def validate_admin_key(request) -> bool:
    """Compare the X-Admin-Key header with ADMIN_API_KEY using constant-time compare."""
    expected = os.getenv("ADMIN_API_KEY") or ""
    provided = request.headers.get(ADMIN_HEADER) or ""
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected, provided)


def client_ip(request) -> str:
    return request.client.host if request and request.client else "unknown"


# -------- Rate limiting (in-memory) --------
_rate_state: Dict[str, list[float]] = {}


def allow_request(key: str, limit: int = 5, window_seconds: int = 60) -> bool:
    """
    Simple sliding-window rate limit stored in memory.
    Returns True if under limit, False otherwise.
    """
    allowed, _ = allow_request_with_remaining(key, limit=limit, window_seconds=window_seconds)
    return allowed


def allow_request_with_remaining(key: str, limit: int = 5, window_seconds: int = 60) -> tuple[bool, int]:
    """
    Sliding-window rate limit with remaining-count feedback.
    Returns (allowed, remaining_after).
    """
    now = time.time()
    window_start = now - window_seconds
    history = [t for t in _rate_state.get(key, []) if t > window_start]
    if len(history) >= limit:
        _rate_state[key] = history
        return False, 0
    history.append(now)
    _rate_state[key] = history
    return True, max(0, limit - len(history))


def reset_rate_limits() -> None:
    _rate_state.clear()


__all__ = [
    "ADMIN_HEADER",
    "admin_key_configured",
    "validate_admin_key",
    "client_ip",
    "allow_request",
    "allow_request_with_remaining",
    "reset_rate_limits",
]
