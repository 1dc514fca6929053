"""
WhatsApp transport: send a text message through an HTTP WhatsApp gateway.

The wait for a send is bounded by WhatsAppConfig.send_timeout_ms. When it
expires the caller gets WhatsAppTimeoutError, but the underlying request is
not cancelled; it finishes (or fails) in the background and is only logged.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional, Set

import httpx

from channels.whatsapp.config import WhatsAppConfig, load_whatsapp_config

JID_SUFFIX = "@s.whatsapp.net"
# Upper bound for a request that outlived the caller's wait.
BACKGROUND_REQUEST_TIMEOUT = 120.0

log = logging.getLogger("whatsapp")

_background_sends: Set[asyncio.Future] = set()


class WhatsAppError(RuntimeError):
    pass


class WhatsAppTimeoutError(WhatsAppError):
    pass


class WhatsAppNotConfiguredError(WhatsAppError):
    pass


def to_jid(phone: str) -> str:
    """'+55 (11) 99999-9999' -> '5511999999999@s.whatsapp.net'; full JIDs pass through."""
    value = (phone or "").strip()
    if "@" in value:
        return value
    digits = re.sub(r"\D", "", value)
    return f"{digits}{JID_SUFFIX}" if digits else ""


def is_timeout_error(error: Optional[str]) -> bool:
    return "timeout" in (error or "").lower()


def _log_late_result(future: asyncio.Future) -> None:
    _background_sends.discard(future)
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        log.warning("WhatsApp send finished after timeout with error: %s", exc)
    else:
        log.info("WhatsApp send finished after timeout")


class WhatsAppClient:
    def __init__(
        self,
        config: Optional[WhatsAppConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or load_whatsapp_config()
        self._http_client = http_client

    async def _post(self, jid: str, text: str) -> None:
        url = f"{self.config.api_url.rstrip('/')}/api/sendText"
        headers = {"X-Api-Key": self.config.api_key} if self.config.api_key else {}
        payload = {"chatId": jid, "text": text, "session": self.config.session}

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=BACKGROUND_REQUEST_TIMEOUT) as client:
                    response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise WhatsAppError(f"WhatsApp gateway returned HTTP {exc.response.status_code}") from exc
        except httpx.TimeoutException as exc:
            raise WhatsAppTimeoutError("WhatsApp gateway timeout") from exc
        except httpx.ConnectError as exc:
            raise WhatsAppError(f"WhatsApp not connected: {exc}") from exc
        except httpx.HTTPError as exc:
            raise WhatsAppError(f"WhatsApp request failed: {exc}") from exc

    async def send_text(self, jid: str, text: str) -> None:
        """Send `text` to `jid`. Raises WhatsAppError (or a subclass) on failure."""
        if not self.config.api_url:
            raise WhatsAppNotConfiguredError("WhatsApp not connected: WHATSAPP_API_URL is not set")

        timeout_ms = self.config.send_timeout_ms
        future = asyncio.ensure_future(self._post(jid, text))
        try:
            await asyncio.wait_for(asyncio.shield(future), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            _background_sends.add(future)
            future.add_done_callback(_log_late_result)
            raise WhatsAppTimeoutError(f"WhatsApp send timeout after {timeout_ms}ms") from None
        log.info("WhatsApp message sent to %s (%d chars)", jid, len(text))


async def send_text_message(jid: str, text: str) -> None:
    """Send with a client built from the current environment."""
    await WhatsAppClient().send_text(jid, text)


__all__ = [
    "JID_SUFFIX",
    "WhatsAppError",
    "WhatsAppTimeoutError",
    "WhatsAppNotConfiguredError",
    "WhatsAppClient",
    "to_jid",
    "is_timeout_error",
    "send_text_message",
]
