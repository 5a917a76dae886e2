import pytest

from chat_autopilot.agent import service
from chat_autopilot.config import AutopilotSettings
from fakes import FakeClock, FakeDocument, RecordingSink


@pytest.fixture
def document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> AutopilotSettings:
    return AutopilotSettings(
        check_interval_seconds=0.01,
        verification_timeout_seconds=0.01,
        send_delay_seconds=0,
        action_cooldown_seconds=1.0,
    )


@pytest.fixture(autouse=True)
def _release_stop_handle():
    yield
    # A test that fails before stopping its autopilot must not block the next one.
    service._stop_handle = None
