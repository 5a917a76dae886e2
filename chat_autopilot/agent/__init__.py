from chat_autopilot.agent.service import Autopilot, get_stop_handle, stop_assistant
from chat_autopilot.agent.state import RecoveryPhase, RecoverySession, SchedulerState
from chat_autopilot.agent.views import ActiveError, BackupOutcome, RecoveryOutcome, TickOutcome

__all__ = [
    'ActiveError',
    'Autopilot',
    'BackupOutcome',
    'RecoveryOutcome',
    'RecoveryPhase',
    'RecoverySession',
    'SchedulerState',
    'TickOutcome',
    'get_stop_handle',
    'stop_assistant',
]
