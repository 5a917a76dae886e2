from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chat_autopilot.dom.views import DomElement
    from chat_autopilot.rules.views import ErrorScenario


@dataclass(frozen=True)
class ActiveError:
    """An element whose text contains a known error message, with the scenario it matched."""
    element: DomElement
    scenario: ErrorScenario


class TickOutcome(enum.Enum):
    SKIPPED_STOPPED = "skipped_stopped"
    SKIPPED_COOLDOWN = "skipped_cooldown"
    SKIPPED_RECOVERY_IN_FLIGHT = "skipped_recovery_in_flight"
    PROACTIVE_ACTION = "proactive_action"
    RECOVERY_STARTED = "recovery_started"
    IDLE = "idle"  # nothing matched; the steady state
    FAILED = "failed"  # host fault caught at the stage boundary


class RecoveryOutcome(enum.Enum):
    VERIFYING = "verifying"
    RECOVERED = "recovered"
    MISSING_CONTAINER = "missing_container"
    MISSING_RECOVERY_CONTROL = "missing_recovery_control"
    RECOVERY_INEFFECTIVE = "recovery_ineffective"
    STALE = "stale"  # verification fired for a session that is no longer current
    ABORTED = "aborted"


class BackupOutcome(enum.Enum):
    SENT = "sent"
    INPUT_MISSING = "input_missing"
    SEND_ICON_MISSING = "send_icon_missing"
    SEND_BUTTON_MISSING = "send_button_missing"

    @property
    def succeeded(self) -> bool:
        return self is BackupOutcome.SENT


__all__ = [
    "ActiveError",
    "TickOutcome",
    "RecoveryOutcome",
    "BackupOutcome",
]
