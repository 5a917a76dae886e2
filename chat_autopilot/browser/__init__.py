from typing import TYPE_CHECKING

# Type stubs for lazy imports
if TYPE_CHECKING:
	from .links import install_same_window_links
	from .session import BrowserSession

# Playwright is only imported once a browser component is actually used
_LAZY_IMPORTS = {
	'BrowserSession': ('.session', 'BrowserSession'),
	'install_same_window_links': ('.links', 'install_same_window_links'),
}


def __getattr__(name: str):
	"""Lazy import mechanism for browser components."""
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		full_module_path = f'chat_autopilot.browser{module_path}'
		try:
			from importlib import import_module

			module = import_module(full_module_path)
			attr = getattr(module, attr_name)
			globals()[name] = attr
			return attr
		except ImportError as e:
			raise ImportError(f'Failed to import {name} from {full_module_path}: {e}') from e

	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ['BrowserSession', 'install_same_window_links']
