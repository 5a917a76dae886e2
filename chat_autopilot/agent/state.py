from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TYPE_CHECKING

from chat_autopilot.exceptions import RecoveryInFlightError

if TYPE_CHECKING:
    from chat_autopilot.rules.views import ErrorScenario

logger = logging.getLogger(__name__)

_session_ids = itertools.count(1)


class RecoveryPhase(Enum):
    IDLE = "IDLE"
    RECOVERING = "RECOVERING"
    VERIFYING = "VERIFYING"


@dataclass(frozen=True)
class RecoverySession:
    """One recovery attempt: from detecting an error to the end of its verification window."""
    scenario: ErrorScenario
    started_at: float
    session_id: int = field(default_factory=lambda: next(_session_ids))


@dataclass
class SchedulerState:
    """
    Mutable state shared by the scheduler and the recovery flow of one autopilot.

    All transitions are synchronous methods, so a check and the matching set always
    happen within one turn of the event loop.
    """
    running: bool = False
    last_action_at: Optional[float] = None
    session: Optional[RecoverySession] = None
    phase: RecoveryPhase = RecoveryPhase.IDLE

    @property
    def recovery_in_flight(self) -> bool:
        return self.session is not None

    def in_cooldown(self, now: float, cooldown_seconds: float) -> bool:
        if self.last_action_at is None:
            return False
        return now - self.last_action_at < cooldown_seconds

    def record_action(self, now: float) -> None:
        self.last_action_at = now

    def begin_recovery(self, scenario: ErrorScenario, now: float) -> RecoverySession:
        if self.session is not None:
            raise RecoveryInFlightError(self.session.scenario.name)
        self.session = RecoverySession(scenario=scenario, started_at=now)
        self.phase = RecoveryPhase.RECOVERING
        self.record_action(now)
        return self.session

    def mark_verifying(self, session: RecoverySession) -> None:
        if self.is_current(session):
            self.phase = RecoveryPhase.VERIFYING

    def is_current(self, session: RecoverySession) -> bool:
        return self.session is not None and self.session.session_id == session.session_id

    def end_recovery(self, session: RecoverySession) -> bool:
        """Return to IDLE if ``session`` is still the active one; stale sessions are ignored."""
        if not self.is_current(session):
            logger.debug(f"Ignoring end of stale recovery session #{session.session_id}")
            return False
        self.session = None
        self.phase = RecoveryPhase.IDLE
        return True

    def reset(self) -> None:
        self.running = False
        self.last_action_at = None
        self.session = None
        self.phase = RecoveryPhase.IDLE
