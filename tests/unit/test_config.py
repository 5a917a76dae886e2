import pytest
from pydantic import ValidationError

from chat_autopilot.config import CONFIG, AutopilotSettings
from chat_autopilot.exceptions import AutopilotConfigurationError
from chat_autopilot.rules import ErrorScenario


def test_defaults_match_the_original_tool():
    s = AutopilotSettings()
    assert s.check_interval_seconds == 2.0
    assert s.verification_timeout_seconds == 5.0
    assert s.action_cooldown_seconds == 1.0
    assert s.send_delay_seconds == 0.5
    assert s.fallback_text == "继续"
    assert s.error_container_selector == ".bg-dropdown-background"
    assert s.input_box_selector == 'div[contenteditable="true"].aislash-editor-input'


def test_from_env_reads_autopilot_variables():
    env = {
        "AUTOPILOT_CHECK_INTERVAL": "3.5",
        "AUTOPILOT_VERIFICATION_TIMEOUT": "8",
        "AUTOPILOT_FALLBACK_TEXT": "continue",
        "AUTOPILOT_SEND_DELAY": "  ",  # blank values are ignored
    }
    s = AutopilotSettings.from_env(env)
    assert s.check_interval_seconds == 3.5
    assert s.verification_timeout_seconds == 8.0
    assert s.fallback_text == "continue"
    assert s.send_delay_seconds == 0.5


def test_explicit_overrides_win_and_none_is_ignored():
    s = AutopilotSettings.from_env({"AUTOPILOT_CHECK_INTERVAL": "3"}, check_interval_seconds=1.0, fallback_text=None)
    assert s.check_interval_seconds == 1.0
    assert s.fallback_text == "继续"


@pytest.mark.parametrize(
    "env",
    [
        {"AUTOPILOT_CHECK_INTERVAL": "soon"},
        {"AUTOPILOT_CHECK_INTERVAL": "0"},
        {"AUTOPILOT_ACTION_COOLDOWN": "-1"},
    ],
)
def test_invalid_env_values_raise_configuration_error(env):
    with pytest.raises(AutopilotConfigurationError):
        AutopilotSettings.from_env(env)


def test_duplicate_scenario_names_are_rejected():
    dup = ErrorScenario(name="Dup", error_substring="a", recovery_button_text="b")
    with pytest.raises(ValidationError):
        AutopilotSettings(error_scenarios=(dup, dup))


def test_settings_are_load_time_constants():
    s = AutopilotSettings()
    with pytest.raises(ValidationError):
        s.check_interval_seconds = 10


def test_process_flags_follow_environment(monkeypatch):
    monkeypatch.setenv("AUTOPILOT_LOGGING_LEVEL", "DEBUG")
    monkeypatch.setenv("AUTOPILOT_SETUP_LOGGING", "false")
    assert CONFIG.AUTOPILOT_LOGGING_LEVEL == "debug"
    assert CONFIG.AUTOPILOT_SETUP_LOGGING is False
