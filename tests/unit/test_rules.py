import re

import pytest
from pydantic import ValidationError

from chat_autopilot.rules import (
    DEFAULT_ERROR_SCENARIOS,
    DEFAULT_PROACTIVE_RULES,
    ErrorScenario,
    MatchKind,
    ProactiveActionRule,
    match_text,
    trim_text,
)


def _rule(name):
    return next(r for r in DEFAULT_PROACTIVE_RULES if r.name == name)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Accept ⏎", True),
        ("Accepted ⏎", True),  # greedy middle
        ("Accept all changes ⏎", True),
        ("   Accept all changes ⏎\n", True),  # trimmed first
        ("Accept", False),  # missing trailing marker
        ("accept ⏎", False),  # case-sensitive
        ("Please Accept ⏎", False),  # anchored at start
    ],
)
def test_accept_suggestion_regex(text, expected):
    assert _rule("Accept Suggestion").matches(text) is expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("resume the conversation", True),
        ("  resume the conversation  ", True),
        ("Resume the conversation.", False),
        ("resume the conversation.", False),
        ("please resume the conversation", False),
    ],
)
def test_resume_conversation_exact_text(text, expected):
    assert _rule("Resume Conversation").matches(text) is expected


def test_match_text_is_uniform_over_kinds():
    assert match_text(MatchKind.REGEX, r"^Try", "Try again")
    assert match_text(MatchKind.REGEX, re.compile(r"again$"), " Try again ")
    assert match_text(MatchKind.EXACT_TEXT, "Try again", " Try again ")
    assert not match_text(MatchKind.EXACT_TEXT, "Try", "Try again")


def test_compiled_pattern_is_accepted_and_normalized():
    rule = ProactiveActionRule(
        name="Run", match_kind=MatchKind.REGEX, pattern=re.compile(r"^Run\b"), target_selector="button"
    )
    assert rule.pattern == r"^Run\b"
    assert rule.matches("Run command")
    assert not rule.matches("Running")


def test_match_kind_accepts_wire_values():
    rule = ProactiveActionRule(name="x", match_kind="text", pattern="Go", target_selector="a")
    assert rule.match_kind is MatchKind.EXACT_TEXT
    assert rule.matches("Go")


def test_rules_are_immutable():
    rule = _rule("Accept Suggestion")
    with pytest.raises(ValidationError):
        rule.pattern = "anything"


def test_default_rule_order_is_priority_order():
    assert [r.name for r in DEFAULT_PROACTIVE_RULES] == ["Accept Suggestion", "Resume Conversation"]
    assert [s.name for s in DEFAULT_ERROR_SCENARIOS] == ["Model Connection Error", "Network Connection Error"]


def test_error_scenario_uses_containment():
    model_error = DEFAULT_ERROR_SCENARIOS[0]
    text = "Oops. We're having trouble connecting to the model provider. This might be temporary."
    assert model_error.is_present_in(text)
    assert not model_error.is_present_in("We're having trouble")


def test_error_scenario_rejects_empty_substring():
    with pytest.raises(ValidationError):
        ErrorScenario(name="Empty", error_substring="", recovery_button_text="Retry")


def test_trimming_follows_the_page_not_str_strip():
    bom, unit_separator = chr(0xFEFF), chr(0x1F)
    assert trim_text(bom + " Try again" + chr(0xA0)) == "Try again"
    assert trim_text("Try again" + unit_separator) == "Try again" + unit_separator
    assert _rule("Accept Suggestion").matches(bom + "Accept ⏎")
    assert not _rule("Resume Conversation").matches("resume the conversation" + unit_separator)
