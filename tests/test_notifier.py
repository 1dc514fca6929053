import asyncio
from datetime import datetime, timezone

from channels.whatsapp.client import WhatsAppTimeoutError
from channels.whatsapp.notifier import (
    MAX_MESSAGE_LENGTH,
    NO_POSITIONS_MESSAGES,
    NO_SNAPSHOT_MESSAGE,
    TRUNCATION_MARKER,
    PositionsNotifier,
    format_positions_with_label,
)
from core.etl.models import OpenPositionCreate
from core.etl.snapshot import LastRetrievedSnapshot

JID = "5511999999999@s.whatsapp.net"


class RecordingTransport:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def __call__(self, jid, text):
        if self.error is not None:
            raise self.error
        self.sent.append((jid, text))


def _row(n):
    return {
        "id": str(n),
        "title": f"Dev {n}",
        "link": f"https://x.com/{n}",
        "company_name": f"Empresa {n}",
        "region": "Sorocaba",
    }


def _snapshot(positions):
    return LastRetrievedSnapshot(
        retrieved_at=datetime(2026, 5, 1, 9, 30, tzinfo=timezone.utc),
        extracted=len(positions),
        transformed=len(positions),
        created=len(positions),
        skipped=0,
        positions=tuple(positions),
    )


def test_positions_list_is_formatted_with_label():
    transport = RecordingTransport()
    notifier = PositionsNotifier(send_text=transport)

    result = asyncio.run(notifier.send_positions_list(JID, [_row(1), _row(2)], "Last 6h open positions (DB)"))

    assert result.sent
    assert result.message == f"Sent 2 positions to {JID}"
    jid, text = transport.sent[0]
    assert jid == JID
    assert text.startswith("📋 *Last 6h open positions (DB)*\nTotal: 2 position(s) from DB\n")
    assert "1. *Dev 1* @ Empresa 1\n   Sorocaba\n   https://x.com/1" in text
    assert "\n\n2. *Dev 2* @ Empresa 2" in text


def test_empty_list_rotates_canned_messages():
    transport = RecordingTransport()
    notifier = PositionsNotifier(send_text=transport)

    for _ in range(3):
        result = asyncio.run(notifier.send_positions_list(JID, [], "label"))
        assert result.sent

    texts = [text for _, text in transport.sent]
    assert texts == [NO_POSITIONS_MESSAGES[0], NO_POSITIONS_MESSAGES[1], NO_POSITIONS_MESSAGES[0]]


def test_reset_rotation():
    notifier = PositionsNotifier(send_text=RecordingTransport())
    notifier.next_no_positions_message()
    assert notifier.rotation_index == 1

    notifier.reset_rotation()

    assert notifier.next_no_positions_message() == NO_POSITIONS_MESSAGES[0]


def test_long_message_is_truncated():
    rows = [dict(_row(i), title="X" * 400) for i in range(400)]

    text = format_positions_with_label(rows, "Big")

    assert len(text) <= MAX_MESSAGE_LENGTH
    assert text.endswith(TRUNCATION_MARKER)
    assert text.startswith("📋 *Big*\nTotal: 400 position(s) from DB\n")


def test_short_message_is_not_truncated():
    text = format_positions_with_label([_row(1)], "Small")
    assert TRUNCATION_MARKER not in text


def test_transport_timeout_is_reported_as_timeout():
    transport = RecordingTransport(error=WhatsAppTimeoutError("WhatsApp send timeout after 30000ms"))
    notifier = PositionsNotifier(send_text=transport)

    result = asyncio.run(notifier.send_positions_list(JID, [_row(1)], "label"))

    assert not result.sent
    assert result.timed_out
    assert result.error == "WhatsApp send timeout after 30000ms"


def test_transport_failure_is_not_a_timeout():
    transport = RecordingTransport(error=RuntimeError("WhatsApp not connected"))
    notifier = PositionsNotifier(send_text=transport)

    result = asyncio.run(notifier.send_positions_list(JID, [_row(1)], "label"))

    assert not result.sent
    assert not result.timed_out
    assert result.to_dict() == {"sent": False, "error": "WhatsApp not connected"}


def test_last_retrieved_without_snapshot_sends_nothing():
    transport = RecordingTransport()
    notifier = PositionsNotifier(send_text=transport)

    result = asyncio.run(notifier.send_last_retrieved(JID, None))

    assert not result.sent
    assert result.message == NO_SNAPSHOT_MESSAGE
    assert transport.sent == []


def test_last_retrieved_with_positions_has_run_header():
    transport = RecordingTransport()
    notifier = PositionsNotifier(send_text=transport)
    position = OpenPositionCreate(title="Dev", link="https://x.com/1", company_name="Acme", region="Sorocaba")

    result = asyncio.run(notifier.send_last_retrieved(JID, _snapshot([position])))

    assert result.sent
    text = transport.sent[0][1]
    assert text.startswith("📋 *Últimas vagas (LinkedIn)*\nRetrieved: 2026-05-01T09:30:00.000+00:00\nCreated: 1 | Skipped: 0\n")
    assert "1. *Dev* @ Acme" in text


def test_last_retrieved_empty_snapshot_uses_rotation():
    transport = RecordingTransport()
    notifier = PositionsNotifier(send_text=transport)

    result = asyncio.run(notifier.send_last_retrieved(JID, _snapshot([])))

    assert result.sent
    assert transport.sent == [(JID, NO_POSITIONS_MESSAGES[0])]
