"""
WhatsApp channel configuration, loaded from environment variables.

The WhatsApp session (pairing, QR, reconnects) lives in an external HTTP
gateway; this process only needs its URL and credentials.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SEND_TIMEOUT_MS = 30_000
DEFAULT_SESSION = "default"


def _int_env(name: str, default: int) -> int:
    try:
        value = int(os.getenv(name) or 0)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class WhatsAppConfig:
    api_url: str = ""
    api_key: str = ""
    session: str = DEFAULT_SESSION
    # Default recipient when an API call does not name one.
    target_jid: str = ""
    # Group used by the scheduler; takes precedence over target_jid there.
    group_id: str = ""
    # Max time to wait for a send. After this we stop waiting and report a timeout.
    send_timeout_ms: int = DEFAULT_SEND_TIMEOUT_MS


def load_whatsapp_config() -> WhatsAppConfig:
    return WhatsAppConfig(
        api_url=(os.getenv("WHATSAPP_API_URL") or "").strip(),
        api_key=(os.getenv("WHATSAPP_API_KEY") or "").strip(),
        session=(os.getenv("WHATSAPP_SESSION") or DEFAULT_SESSION).strip(),
        target_jid=(os.getenv("WHATSAPP_TARGET_JID") or "").strip(),
        group_id=(os.getenv("WHATSAPP_GROUP_ID") or "").strip(),
        send_timeout_ms=_int_env("WHATSAPP_SEND_TIMEOUT_MS", DEFAULT_SEND_TIMEOUT_MS),
    )


__all__ = [
    "DEFAULT_SEND_TIMEOUT_MS",
    "WhatsAppConfig",
    "load_whatsapp_config",
]
