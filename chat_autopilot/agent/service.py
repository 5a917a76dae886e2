from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable, Optional

from chat_autopilot.agent.actuator import ProactiveActionHandler
from chat_autopilot.agent.backup import BackupPlanExecutor
from chat_autopilot.agent.perception import ErrorDetector
from chat_autopilot.agent.recovery import RecoveryStateMachine
from chat_autopilot.agent.scheduler import Scheduler
from chat_autopilot.agent.stages import ErrorRecoveryStage, ProactiveStage
from chat_autopilot.agent.state import SchedulerState
from chat_autopilot.agent.views import TickOutcome
from chat_autopilot.config import AutopilotSettings
from chat_autopilot.logging_config import LoggingSink, LogSink, Severity
from chat_autopilot.timing import monotonic_seconds

if TYPE_CHECKING:
    from chat_autopilot.dom.views import DomDocument

# Process-wide control surface: set while an autopilot runs, cleared on stop.
_stop_handle: Optional[Callable[[], bool]] = None
_default_sink = LoggingSink()


def get_stop_handle() -> Optional[Callable[[], bool]]:
    """The stop function of the running autopilot, or None when nothing runs."""
    return _stop_handle


def stop_assistant() -> bool:
    """Stop whichever autopilot is running in this process."""
    if _stop_handle is None:
        _default_sink("The assistant is already stopped.", Severity.WARN)
        return False
    return _stop_handle()


class Autopilot:
    """Public-facing wrapper: builds the tick pipeline from settings and owns its lifecycle."""

    def __init__(
        self,
        document: DomDocument,
        settings: Optional[AutopilotSettings] = None,
        log_sink: Optional[LogSink] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.document = document
        self.settings = settings or AutopilotSettings()
        self.log = log_sink or _default_sink
        self.clock = clock or monotonic_seconds
        self.state = SchedulerState()

        s = self.settings
        self.actuator = ProactiveActionHandler(
            document,
            s.proactive_rules,
            self.log,
            clickable_selector=s.proactive_clickable_selector,
            log_empty_queries=s.check_interval_seconds >= s.quiet_poll_threshold_seconds,
        )
        self.detector = ErrorDetector(document, s.error_scenarios, text_selector=s.error_text_selector)
        self.backup = BackupPlanExecutor(document, s, self.log)
        self.recovery = RecoveryStateMachine(self.detector, self.backup, self.state, s, self.log, clock=self.clock)
        self.scheduler = Scheduler(
            self.state,
            [
                ProactiveStage(self.actuator, self.state, clock=self.clock),
                ErrorRecoveryStage(self.detector, self.recovery, self.state),
            ],
            self.log,
            interval_seconds=s.check_interval_seconds,
            cooldown_seconds=s.action_cooldown_seconds,
            clock=self.clock,
        )

    @property
    def is_running(self) -> bool:
        return self.state.running

    def start(self) -> bool:
        """Start ticking on the running event loop. Refuses while any autopilot holds the stop handle."""
        global _stop_handle
        if _stop_handle is not None or self.state.running:
            self.log("The assistant is already running. Call stop_assistant() first to restart it.", Severity.WARN)
            return False

        self.scheduler.start()
        _stop_handle = self.stop
        self.log(
            f"Assistant started, checking every {self.settings.check_interval_seconds:g} seconds.",
            Severity.SUCCESS,
        )
        self.log("Tip: call stop_assistant() or press Ctrl+C to stop the assistant.", Severity.INFO)
        return True

    def stop(self) -> bool:
        global _stop_handle
        if not self.state.running:
            self.log("The assistant is already stopped.", Severity.WARN)
            return False

        self.scheduler.stop()
        # Clears the in-flight session; a pending verification sees it is stale and does nothing.
        self.state.reset()
        if _stop_handle == self.stop:
            _stop_handle = None
        self.log("Assistant stopped manually.", Severity.INFO)
        return True

    async def tick(self) -> TickOutcome:
        """Run one check outside the timer, e.g. right after attaching."""
        return await self.scheduler.tick()

    async def wait_stopped(self) -> None:
        task = self.scheduler.task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
