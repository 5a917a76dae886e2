import pytest

from chat_autopilot.agent.backup import BackupPlanExecutor
from chat_autopilot.agent.perception import ErrorDetector
from chat_autopilot.agent.recovery import RecoveryStateMachine
from chat_autopilot.agent.state import RecoveryPhase, SchedulerState
from chat_autopilot.agent.views import ActiveError, RecoveryOutcome
from chat_autopilot.exceptions import RecoveryInFlightError
from chat_autopilot.rules import DEFAULT_ERROR_SCENARIOS
from fakes import add_chat_input, add_error_notice

MODEL_ERROR = DEFAULT_ERROR_SCENARIOS[0]
NETWORK_ERROR = DEFAULT_ERROR_SCENARIOS[1]


def build(document, settings, sink, clock):
    state = SchedulerState(running=True)
    detector = ErrorDetector(document, settings.error_scenarios, text_selector=settings.error_text_selector)
    backup = BackupPlanExecutor(document, settings, sink)
    return state, RecoveryStateMachine(detector, backup, state, settings, sink, clock=clock)


@pytest.mark.asyncio
async def test_recovery_button_clears_error(document, settings, sink, clock):
    error_span, _, button = add_error_notice(document, settings, "Connection failed", "Try again")
    button.on_click = lambda: document.remove(settings.error_text_selector, error_span)
    _, send_button = add_chat_input(document, settings)
    state, recovery = build(document, settings, sink, clock)

    outcome = await recovery.begin(ActiveError(error_span, NETWORK_ERROR))

    assert outcome is RecoveryOutcome.VERIFYING
    assert button.clicks == 1
    assert state.phase is RecoveryPhase.VERIFYING
    assert state.last_action_at == clock.now

    assert await recovery.verification_task is RecoveryOutcome.RECOVERED
    assert send_button.clicks == 0
    assert state.session is None
    assert state.phase is RecoveryPhase.IDLE
    assert "'Try again' worked, the error is gone." in sink.messages("success")
    assert sink.messages()[-1] == "Recovery flow finished."


@pytest.mark.asyncio
async def test_persistent_error_runs_backup_plan(document, settings, sink, clock):
    error_span, _, button = add_error_notice(
        document, settings, "We're having trouble connecting to the model provider", "Resume"
    )
    input_box, send_button = add_chat_input(document, settings)
    state, recovery = build(document, settings, sink, clock)

    assert await recovery.begin(ActiveError(error_span, MODEL_ERROR)) is RecoveryOutcome.VERIFYING
    assert await recovery.verification_task is RecoveryOutcome.RECOVERY_INEFFECTIVE

    assert button.clicks == 1
    assert input_box.inner_html == "<p>继续</p>"
    assert send_button.clicks == 1
    assert state.session is None
    assert "Initial recovery failed, the error is still present." in sink.messages("error")


@pytest.mark.asyncio
async def test_missing_container_goes_straight_to_backup(document, settings, sink, clock):
    error_span = document.element("Connection failed")
    document.add(settings.error_text_selector, error_span)
    _, send_button = add_chat_input(document, settings)
    state, recovery = build(document, settings, sink, clock)

    assert await recovery.begin(ActiveError(error_span, NETWORK_ERROR)) is RecoveryOutcome.MISSING_CONTAINER
    assert send_button.clicks == 1
    assert recovery.verification_task is None
    assert state.session is None


@pytest.mark.asyncio
async def test_wrong_label_counts_as_missing_control(document, settings, sink, clock):
    error_span, _, button = add_error_notice(document, settings, "Connection failed", "Retry")
    add_chat_input(document, settings)
    state, recovery = build(document, settings, sink, clock)

    assert await recovery.begin(ActiveError(error_span, NETWORK_ERROR)) is RecoveryOutcome.MISSING_RECOVERY_CONTROL
    assert button.clicks == 0
    assert state.session is None
    assert "No 'Try again' button in the error notice, going straight to the backup plan." in sink.messages("error")


@pytest.mark.asyncio
async def test_label_without_clickable_ancestor(document, settings, sink, clock):
    error_span, container, button = add_error_notice(document, settings, "Connection failed", "Try again")
    label = container.children[settings.recovery_label_selector][1]
    label.closest_map.clear()
    _, send_button = add_chat_input(document, settings)
    _, recovery = build(document, settings, sink, clock)

    assert await recovery.begin(ActiveError(error_span, NETWORK_ERROR)) is RecoveryOutcome.MISSING_RECOVERY_CONTROL
    assert button.clicks == 0
    assert send_button.clicks == 1


@pytest.mark.asyncio
async def test_second_session_is_refused_while_one_is_active(document, settings, sink, clock):
    error_span, _, _ = add_error_notice(document, settings, "Connection failed", "Try again")
    add_chat_input(document, settings)
    state, recovery = build(document, settings, sink, clock)

    await recovery.begin(ActiveError(error_span, NETWORK_ERROR))
    with pytest.raises(RecoveryInFlightError, match="Network Connection Error"):
        await recovery.begin(ActiveError(error_span, NETWORK_ERROR))

    await recovery.verification_task
    assert state.session is None


@pytest.mark.asyncio
async def test_verification_after_reset_is_stale(document, settings, sink, clock):
    error_span, _, _ = add_error_notice(document, settings, "Connection failed", "Try again")
    _, send_button = add_chat_input(document, settings)
    state, recovery = build(document, settings, sink, clock)

    await recovery.begin(ActiveError(error_span, NETWORK_ERROR))
    state.reset()

    assert await recovery.verification_task is RecoveryOutcome.STALE
    assert send_button.clicks == 0
    assert "Recovery flow finished." not in sink.messages()


@pytest.mark.asyncio
async def test_host_fault_aborts_and_releases_session(document, settings, sink, clock):
    error_span = document.element("Connection failed")

    async def detached(selector):
        raise RuntimeError("node is detached")

    error_span.closest = detached
    state, recovery = build(document, settings, sink, clock)

    assert await recovery.begin(ActiveError(error_span, NETWORK_ERROR)) is RecoveryOutcome.ABORTED
    assert state.session is None
    assert state.phase is RecoveryPhase.IDLE
    assert any("node is detached" in m for m in sink.messages("error"))
