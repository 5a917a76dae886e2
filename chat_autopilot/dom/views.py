from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class DomElement(Protocol):
	"""The slice of an element the autopilot reads and mutates.

	Everything is async because the real element lives in a browser process. An element
	that has left the document reads as empty and unclickable, has no ancestors or
	children, and raises StaleElementError when mutated.
	"""

	async def text_content(self) -> str: ...

	async def closest(self, selector: str) -> Optional['DomElement']: ...

	async def query_selector_all(self, selector: str) -> list['DomElement']: ...

	async def is_clickable(self) -> bool: ...

	async def click(self) -> None: ...

	async def focus(self) -> None: ...

	async def set_inner_html(self, html: str) -> None: ...

	async def dispatch_input_event(self) -> None: ...


@runtime_checkable
class DomDocument(Protocol):
	"""Selector queries against the host document, results in document order."""

	async def query_selector(self, selector: str) -> Optional[DomElement]: ...

	async def query_selector_all(self, selector: str) -> list[DomElement]: ...
