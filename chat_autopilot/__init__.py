from chat_autopilot.config import CONFIG
from chat_autopilot.logging_config import setup_logging

# Only set up logging when the host application has not opted out
if CONFIG.AUTOPILOT_SETUP_LOGGING:
	logger = setup_logging()
else:
	import logging

	logger = logging.getLogger('chat_autopilot')


# --- Lightweight, lazy re-exports ---
# Keep `import chat_autopilot` cheap: Playwright is only loaded when the browser layer is used.

_LAZY_EXPORTS = {
	'Autopilot': ('chat_autopilot.agent.service', 'Autopilot'),
	'stop_assistant': ('chat_autopilot.agent.service', 'stop_assistant'),
	'get_stop_handle': ('chat_autopilot.agent.service', 'get_stop_handle'),
	'AutopilotSettings': ('chat_autopilot.config', 'AutopilotSettings'),
	'ProactiveActionRule': ('chat_autopilot.rules.views', 'ProactiveActionRule'),
	'ErrorScenario': ('chat_autopilot.rules.views', 'ErrorScenario'),
	'MatchKind': ('chat_autopilot.rules.views', 'MatchKind'),
	'BrowserSession': ('chat_autopilot.browser.session', 'BrowserSession'),
	'PlaywrightDomDocument': ('chat_autopilot.dom.service', 'PlaywrightDomDocument'),
}


def __getattr__(name: str):
	entry = _LAZY_EXPORTS.get(name)
	if not entry:
		raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
	module_path, attr_name = entry
	try:
		from importlib import import_module

		module = import_module(module_path)
		attr = getattr(module, attr_name)
		globals()[name] = attr
		return attr
	except ImportError as e:
		raise ImportError(f'Failed to import {name} from {module_path}: {e}') from e


__all__ = list(_LAZY_EXPORTS.keys())
