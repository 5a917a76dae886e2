"""
Configuration for chat_autopilot.

`CONFIG` exposes process-level flags read from the environment (after `.env` is loaded);
`AutopilotSettings` holds the load-time constants of a single autopilot: timings, the
fallback phrase, the rule tables and the selectors that describe the host application.
"""
from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from chat_autopilot.exceptions import AutopilotConfigurationError
from chat_autopilot.rules import (
    DEFAULT_ERROR_SCENARIOS,
    DEFAULT_PROACTIVE_RULES,
    ErrorScenario,
    ProactiveActionRule,
)

load_dotenv()


class _Config:
    """Lazily reads process flags so tests can monkeypatch the environment."""

    @property
    def AUTOPILOT_LOGGING_LEVEL(self) -> str:
        return os.getenv('AUTOPILOT_LOGGING_LEVEL', 'info').lower()

    @property
    def AUTOPILOT_SETUP_LOGGING(self) -> bool:
        return os.getenv('AUTOPILOT_SETUP_LOGGING', 'true').lower() != 'false'


CONFIG = _Config()

# env var -> settings field
_ENV_FIELDS = {
    'AUTOPILOT_CHECK_INTERVAL': 'check_interval_seconds',
    'AUTOPILOT_VERIFICATION_TIMEOUT': 'verification_timeout_seconds',
    'AUTOPILOT_ACTION_COOLDOWN': 'action_cooldown_seconds',
    'AUTOPILOT_SEND_DELAY': 'send_delay_seconds',
    'AUTOPILOT_FALLBACK_TEXT': 'fallback_text',
}


class AutopilotSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Timings
    check_interval_seconds: float = Field(2.0, gt=0, description="Period of the scheduler tick.")
    verification_timeout_seconds: float = Field(5.0, gt=0, description="Wait after a recovery click before re-checking the error.")
    action_cooldown_seconds: float = Field(1.0, ge=0, description="Ticks within this window after any action are no-ops.")
    send_delay_seconds: float = Field(0.5, ge=0, description="Pause between typing the fallback phrase and clicking send.")
    quiet_poll_threshold_seconds: float = Field(
        5.0,
        description="Below this tick interval, selectors with no candidates are skipped without a debug log.",
    )

    # Backup plan
    fallback_text: str = Field('继续', min_length=1, description="Phrase typed into the chat input by the backup plan.")

    # Rule tables (order is priority)
    proactive_rules: tuple[ProactiveActionRule, ...] = DEFAULT_PROACTIVE_RULES
    error_scenarios: tuple[ErrorScenario, ...] = DEFAULT_ERROR_SCENARIOS

    # Host application selectors
    proactive_clickable_selector: str = 'div, a, span[role="link"], [data-link]'
    error_text_selector: str = 'span'
    error_container_selector: str = '.bg-dropdown-background'
    recovery_label_selector: str = 'span'
    recovery_clickable_selector: str = 'div[role="button"], a, span[role="link"]'
    input_box_selector: str = 'div[contenteditable="true"].aislash-editor-input'
    send_icon_selector: str = '.anysphere-icon-button:not([data-disabled="true"]) span.codicon-arrow-up-two'
    send_button_selector: str = '.anysphere-icon-button'

    @model_validator(mode='after')
    def _check_rule_names(self) -> 'AutopilotSettings':
        for label, items in (('proactive rule', self.proactive_rules), ('error scenario', self.error_scenarios)):
            names = [item.name for item in items]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {label} names: {', '.join(duplicates)}")
        return self

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None, **overrides: Any) -> 'AutopilotSettings':
        """Build settings from AUTOPILOT_* environment variables; explicit overrides win."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            raw = env.get(env_name)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except ValidationError as e:
            raise AutopilotConfigurationError(f"Invalid autopilot settings: {e}") from e
