"""
Format open positions as a WhatsApp text message and send it.

Failures never escape: every send returns a SendResult, and callers use
SendResult.timed_out to tell a slow gateway apart from other failures.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from channels.whatsapp.client import is_timeout_error, send_text_message
from core.etl.snapshot import LastRetrievedSnapshot

MAX_MESSAGE_LENGTH = 65000
TRUNCATION_MARKER = "\n\n... (truncated)"
# Room kept free for the truncation marker.
TRUNCATION_MARGIN = 50

# Sent instead of an empty listing, alternating.
NO_POSITIONS_MESSAGES = (
    "Nenhuma vaga nova ao Sol por enquanto pessoal.",
    "Não há vagas!",
)
NO_SNAPSHOT_MESSAGE = "No open positions available. Run ETL first (or wait for the next run)."

log = logging.getLogger("whatsapp")

SendText = Callable[[str, str], Awaitable[None]]


@dataclass
class SendResult:
    sent: bool
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def timed_out(self) -> bool:
        return not self.sent and is_timeout_error(self.error)

    def to_dict(self) -> Dict:
        data = {"sent": self.sent, "message": self.message, "error": self.error}
        return {k: v for k, v in data.items() if v is not None}


def _message_fields(position) -> Dict[str, str]:
    """Positions come either as OpenPositionCreate models or as DB rows."""
    data = position.model_dump() if hasattr(position, "model_dump") else dict(position)
    return {
        "title": data.get("title") or "",
        "company_name": data.get("company_name") or data.get("companyName") or "",
        "region": data.get("region") or "",
        "link": data.get("link") or "",
    }


def format_positions_body(positions: Iterable) -> str:
    blocks = []
    for i, position in enumerate(positions, start=1):
        p = _message_fields(position)
        blocks.append(f"{i}. *{p['title']}* @ {p['company_name']}\n   {p['region']}\n   {p['link']}")
    return "\n\n".join(blocks)


def _fit(header: str, body: str) -> str:
    text = header + body
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    room = max(0, MAX_MESSAGE_LENGTH - len(header) - TRUNCATION_MARGIN)
    return header + body[:room] + TRUNCATION_MARKER


def format_positions_with_label(positions: List, label: str) -> str:
    header = "\n".join([f"📋 *{label}*", f"Total: {len(positions)} position(s) from DB", ""])
    return _fit(header, format_positions_body(positions))


def format_snapshot(snapshot: LastRetrievedSnapshot) -> str:
    header = "\n".join(
        [
            "📋 *Últimas vagas (LinkedIn)*",
            f"Retrieved: {snapshot.retrieved_at.isoformat(timespec='milliseconds')}",
            f"Created: {snapshot.created} | Skipped: {snapshot.skipped}",
            "",
        ]
    )
    return _fit(header, format_positions_body(snapshot.positions))


class PositionsNotifier:
    def __init__(self, send_text: SendText = send_text_message, no_positions_messages=NO_POSITIONS_MESSAGES):
        self._send_text = send_text
        self._no_positions_messages = tuple(no_positions_messages)
        self._rotation = 0

    @property
    def rotation_index(self) -> int:
        return self._rotation

    def reset_rotation(self) -> None:
        self._rotation = 0

    def next_no_positions_message(self) -> str:
        message = self._no_positions_messages[self._rotation]
        self._rotation = (self._rotation + 1) % len(self._no_positions_messages)
        return message

    async def _deliver(self, jid: str, text: str, success_message: str) -> SendResult:
        try:
            await self._send_text(jid, text)
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
            log.warning("WhatsApp send to %s failed: %s", jid, error)
            return SendResult(sent=False, error=error)
        return SendResult(sent=True, message=success_message)

    async def send_no_positions(self, jid: str) -> SendResult:
        return await self._deliver(jid, self.next_no_positions_message(), "Sent no-positions message.")

    async def send_positions_list(self, jid: str, positions: Iterable, label: str) -> SendResult:
        """Send a list of positions (e.g. from the DB) under a header `label`."""
        positions = list(positions)
        if not positions:
            return await self.send_no_positions(jid)
        text = format_positions_with_label(positions, label)
        return await self._deliver(jid, text, f"Sent {len(positions)} positions to {jid}")

    async def send_last_retrieved(self, jid: str, snapshot: Optional[LastRetrievedSnapshot]) -> SendResult:
        """Send the last ETL snapshot. No snapshot yet means nothing is sent."""
        if snapshot is None:
            return SendResult(sent=False, message=NO_SNAPSHOT_MESSAGE)
        if not snapshot.positions:
            return await self.send_no_positions(jid)
        text = format_snapshot(snapshot)
        return await self._deliver(jid, text, f"Sent {len(snapshot.positions)} positions to {jid}")


notifier = PositionsNotifier()


__all__ = [
    "MAX_MESSAGE_LENGTH",
    "TRUNCATION_MARKER",
    "NO_POSITIONS_MESSAGES",
    "NO_SNAPSHOT_MESSAGE",
    "SendResult",
    "PositionsNotifier",
    "notifier",
    "format_positions_body",
    "format_positions_with_label",
    "format_snapshot",
]
