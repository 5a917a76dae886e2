"""
Recovery state machine for connection error banners.

IDLE -> RECOVERING -> VERIFYING -> IDLE. Entering RECOVERING claims the single session
slot on SchedulerState; every path out of the flow gives it back. The verification wait
is a separate asyncio task, so the scheduler keeps ticking (and skipping) meanwhile.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Optional

from chat_autopilot.agent.views import RecoveryOutcome
from chat_autopilot.logging_config import LogSink, Severity
from chat_autopilot.rules.views import trim_text
from chat_autopilot.timing import monotonic_seconds

if TYPE_CHECKING:
    from chat_autopilot.agent.backup import BackupPlanExecutor
    from chat_autopilot.agent.perception import ErrorDetector
    from chat_autopilot.agent.state import RecoverySession, SchedulerState
    from chat_autopilot.agent.views import ActiveError
    from chat_autopilot.config import AutopilotSettings
    from chat_autopilot.dom.views import DomElement
    from chat_autopilot.rules.views import ErrorScenario

logger = logging.getLogger(__name__)


class RecoveryStateMachine:
    def __init__(
        self,
        detector: ErrorDetector,
        backup: BackupPlanExecutor,
        state: SchedulerState,
        settings: AutopilotSettings,
        log: LogSink,
        clock: Callable[[], float] = monotonic_seconds,
    ):
        self.detector = detector
        self.backup = backup
        self.state = state
        self.settings = settings
        self.log = log
        self.clock = clock
        self._verification_task: Optional[asyncio.Task] = None

    @property
    def verification_task(self) -> Optional[asyncio.Task]:
        """The most recently scheduled verification, if any."""
        return self._verification_task

    async def begin(self, active_error: ActiveError) -> RecoveryOutcome:
        """
        Start a recovery session for ``active_error``.

        Raises:
            RecoveryInFlightError: another session is still active.
        """
        scenario = active_error.scenario
        session = self.state.begin_recovery(scenario, self.clock())
        try:
            self.log(f'Detected error: "{scenario.name}". Starting recovery...', Severity.WARN)
            return await self._click_recovery_control(active_error.element, scenario, session)
        except Exception as e:
            logger.error(f"Recovery session #{session.session_id} failed", exc_info=True)
            self.log(f'Recovery for "{scenario.name}" aborted: {type(e).__name__}: {e}', Severity.ERROR)
            self.state.end_recovery(session)
            return RecoveryOutcome.ABORTED

    async def _click_recovery_control(
        self, element: DomElement, scenario: ErrorScenario, session: RecoverySession
    ) -> RecoveryOutcome:
        container = await element.closest(self.settings.error_container_selector)
        if container is None:
            self.log("Error notice container not found, going straight to the backup plan.", Severity.ERROR)
            await self._fall_back(session)
            return RecoveryOutcome.MISSING_CONTAINER

        button = await self._find_recovery_control(container, scenario)
        if button is None or not await button.is_clickable():
            self.log(
                f"No '{scenario.recovery_button_text}' button in the error notice, going straight to the backup plan.",
                Severity.ERROR,
            )
            await self._fall_back(session)
            return RecoveryOutcome.MISSING_RECOVERY_CONTROL

        timeout = self.settings.verification_timeout_seconds
        self.log(
            f"Clicked '{scenario.recovery_button_text}'. Entering {timeout:g}s verification window...",
            Severity.SUCCESS,
        )
        await button.click()
        self.state.mark_verifying(session)
        self._verification_task = asyncio.create_task(
            self._verify_later(session, timeout), name=f"recovery-verify-{session.session_id}"
        )
        return RecoveryOutcome.VERIFYING

    async def _find_recovery_control(self, container: DomElement, scenario: ErrorScenario) -> Optional[DomElement]:
        # Only the first label with the exact text counts, even if it has no clickable ancestor.
        for label in await container.query_selector_all(self.settings.recovery_label_selector):
            if trim_text(await label.text_content()) == scenario.recovery_button_text:
                return await label.closest(self.settings.recovery_clickable_selector)
        return None

    async def _fall_back(self, session: RecoverySession) -> None:
        try:
            await self.backup.execute_backup_plan()
        finally:
            self.state.end_recovery(session)

    async def _verify_later(self, session: RecoverySession, delay: float) -> RecoveryOutcome:
        await asyncio.sleep(delay)
        return await self.verify(session)

    async def verify(self, session: RecoverySession) -> RecoveryOutcome:
        """Close the verification window of ``session``; a stale session is left alone."""
        if not self.state.is_current(session):
            logger.debug(f"Verification for stale recovery session #{session.session_id} skipped")
            return RecoveryOutcome.STALE

        scenario = session.scenario
        try:
            self.log("Verification window over, re-checking error state...", Severity.INFO)
            if await self.detector.find_active_error() is not None:
                self.log("Initial recovery failed, the error is still present.", Severity.ERROR)
                await self.backup.execute_backup_plan()
                outcome = RecoveryOutcome.RECOVERY_INEFFECTIVE
            else:
                self.log(f"'{scenario.recovery_button_text}' worked, the error is gone.", Severity.SUCCESS)
                outcome = RecoveryOutcome.RECOVERED
        except Exception as e:
            logger.error(f"Verification of recovery session #{session.session_id} failed", exc_info=True)
            self.log(f'Verification for "{scenario.name}" aborted: {type(e).__name__}: {e}', Severity.ERROR)
            outcome = RecoveryOutcome.ABORTED

        self.log("Recovery flow finished.", Severity.INFO)
        self.state.end_recovery(session)
        return outcome
