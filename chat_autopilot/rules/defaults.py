from chat_autopilot.rules.views import ErrorScenario, MatchKind, ProactiveActionRule

# Priority 1: clicked whenever present. Order is priority.
DEFAULT_PROACTIVE_RULES: tuple[ProactiveActionRule, ...] = (
    ProactiveActionRule(
        name='Accept Suggestion',
        match_kind=MatchKind.REGEX,
        pattern=r'^Accept.*⏎$',
        target_selector='span',
    ),
    ProactiveActionRule(
        name='Resume Conversation',
        match_kind=MatchKind.EXACT_TEXT,
        pattern='resume the conversation',
        target_selector='a, span',
    ),
)

# Priority 2: connection error banners and the button that retries them.
DEFAULT_ERROR_SCENARIOS: tuple[ErrorScenario, ...] = (
    ErrorScenario(
        name='Model Connection Error',
        error_substring="We're having trouble connecting to the model provider",
        recovery_button_text='Resume',
    ),
    ErrorScenario(
        name='Network Connection Error',
        error_substring='Connection failed',
        recovery_button_text='Try again',
    ),
)
