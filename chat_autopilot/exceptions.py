class AutopilotError(Exception):
	"""Base class for all chat_autopilot errors."""


class AutopilotConfigurationError(AutopilotError):
	"""Raised when settings or environment values cannot be used."""


class RecoveryInFlightError(AutopilotError):
	"""Raised when a recovery session is requested while another one is still active."""

	def __init__(self, active_scenario: str):
		self.active_scenario = active_scenario
		super().__init__(f'Recovery for "{active_scenario}" is still in flight')


class BrowserConnectionError(AutopilotError):
	"""Raised when the browser session cannot attach to or launch Chromium."""


class StaleElementError(AutopilotError):
	"""Raised when an element is acted upon after it left the document or its text changed."""
