from chat_autopilot.rules.defaults import DEFAULT_ERROR_SCENARIOS, DEFAULT_PROACTIVE_RULES
from chat_autopilot.rules.views import ErrorScenario, MatchKind, ProactiveActionRule, match_text, trim_text

__all__ = [
    'DEFAULT_ERROR_SCENARIOS',
    'DEFAULT_PROACTIVE_RULES',
    'ErrorScenario',
    'MatchKind',
    'ProactiveActionRule',
    'match_text',
    'trim_text',
]
