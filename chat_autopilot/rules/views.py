from __future__ import annotations

import enum
import re
from typing import Any, Optional, Pattern

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class MatchKind(str, enum.Enum):
    """How a proactive rule compares its pattern against an element's trimmed text."""

    REGEX = 'regex'
    EXACT_TEXT = 'text'


# The characters String.prototype.trim removes: ECMAScript WhiteSpace and LineTerminator.
JS_WHITESPACE = '\t\n\v\f\r ' + ''.join(
    map(chr, (0xA0, 0x1680, *range(0x2000, 0x200B), 0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF))
)


def trim_text(text: str) -> str:
    """Trim the way the page's own scripts do; str.strip() differs on U+FEFF and the C0/C1 separators."""
    return text.strip(JS_WHITESPACE)


def match_text(kind: MatchKind, pattern: str | Pattern[str], text: str) -> bool:
    """Uniform matcher shared by every rule.

    Regex patterns are searched (case-sensitive) in the trimmed text, so anchors in the
    pattern decide whether the whole text has to match. Exact-text patterns require
    equality after trimming.
    """
    trimmed = trim_text(text)
    if kind is MatchKind.REGEX:
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        return regex.search(trimmed) is not None
    if kind is MatchKind.EXACT_TEXT:
        return trimmed == pattern
    raise ValueError(f'Unsupported match kind: {kind!r}')


class ProactiveActionRule(BaseModel):
    """A UI affordance that is clicked whenever it shows up, independent of any error state."""

    model_config = ConfigDict(frozen=True)

    name: str
    match_kind: MatchKind
    pattern: str = Field(description="Regex source for REGEX rules, literal text for EXACT_TEXT rules.")
    target_selector: str = Field(description="CSS selector whose matches are tested in document order.")

    _regex: Optional[Pattern[str]] = PrivateAttr(default=None)

    @field_validator('pattern', mode='before')
    @classmethod
    def _normalize_pattern(cls, value: Any) -> Any:
        # Compiled patterns are accepted for convenience; only their source is kept.
        if isinstance(value, re.Pattern):
            return value.pattern
        return value

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        if self.match_kind is MatchKind.REGEX:
            self._regex = re.compile(self.pattern)

    def matches(self, text: str) -> bool:
        return match_text(self.match_kind, self._regex or self.pattern, text)


class ErrorScenario(BaseModel):
    """A known error banner and the label of the control that dismisses it."""

    model_config = ConfigDict(frozen=True)

    name: str
    error_substring: str = Field(min_length=1)
    recovery_button_text: str = Field(min_length=1)

    def is_present_in(self, text: str) -> bool:
        return self.error_substring in text
