import pytest

from app import security
from channels.whatsapp.notifier import notifier
from core.etl.snapshot import last_retrieved_store


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Module-level state (snapshot, rotation, rate limits) must not leak between tests."""
    last_retrieved_store.clear()
    notifier.reset_rotation()
    security.reset_rate_limits()
    yield
    last_retrieved_store.clear()
    notifier.reset_rotation()
    security.reset_rate_limits()
