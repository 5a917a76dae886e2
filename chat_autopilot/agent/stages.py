from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol

from chat_autopilot.agent.views import TickOutcome
from chat_autopilot.timing import monotonic_seconds

if TYPE_CHECKING:
    from chat_autopilot.agent.actuator import ProactiveActionHandler
    from chat_autopilot.agent.perception import ErrorDetector
    from chat_autopilot.agent.recovery import RecoveryStateMachine
    from chat_autopilot.agent.state import SchedulerState


class TickStage(Protocol):
    """One priority level of a tick. Returning an outcome ends the tick; None hands over to the next stage."""

    name: str

    async def run(self) -> Optional[TickOutcome]: ...


class ProactiveStage:
    name = "proactive"

    def __init__(self, handler: ProactiveActionHandler, state: SchedulerState, clock: Callable[[], float] = monotonic_seconds):
        self.handler = handler
        self.state = state
        self.clock = clock

    async def run(self) -> Optional[TickOutcome]:
        if await self.handler.try_proactive_action():
            self.state.record_action(self.clock())
            return TickOutcome.PROACTIVE_ACTION
        return None


class ErrorRecoveryStage:
    name = "error_recovery"

    def __init__(self, detector: ErrorDetector, recovery: RecoveryStateMachine, state: SchedulerState):
        self.detector = detector
        self.recovery = recovery
        self.state = state

    async def run(self) -> Optional[TickOutcome]:
        active_error = await self.detector.find_active_error()
        if active_error is None:
            return None
        if self.state.recovery_in_flight:
            return TickOutcome.SKIPPED_RECOVERY_IN_FLIGHT
        await self.recovery.begin(active_error)
        return TickOutcome.RECOVERY_STARTED
