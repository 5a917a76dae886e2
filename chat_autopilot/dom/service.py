from typing import TYPE_CHECKING, Any, Optional

from chat_autopilot.exceptions import StaleElementError

if TYPE_CHECKING:
	from chat_autopilot.browser.types import Page

# One step of a query path: (op, selector, index, pinned text). op is 'query' (nth match of
# querySelectorAll, optionally pinned to the text seen at query time) or 'closest'.
PathStep = tuple[str, str, Optional[int], Optional[str]]

# Walks a query path from the document. A pinned step whose node no longer carries the text it
# had at query time resolves to null, so a re-rendered list never redirects an action.
RESOLVE_PATH_JS = """
(path) => {
  let node = document;
  for (const [op, selector, index, text] of path) {
    if (op === 'closest') {
      node = node.closest(selector);
    } else {
      node = node.querySelectorAll(selector)[index];
      if (node && text !== null && (node.textContent || '') !== text) return null;
    }
    if (!node) return null;
  }
  return node;
}
"""


class PlaywrightDomElement:
	"""DomElement addressed by its query path instead of an element handle.

	Every call re-resolves the path inside the page and runs its action in the same
	evaluate, so no handle is ever left alive in the page. Elements coming out of
	selector queries carry the text snapshot taken in that query's round trip.
	"""

	def __init__(self, page: 'Page', path: tuple[PathStep, ...], text: Optional[str] = None):
		self.page = page
		self.path = path
		self._text = text

	def __repr__(self) -> str:
		return f'PlaywrightDomElement(path={self.path!r})'

	async def _evaluate(self, action: str, arg: Any = None) -> tuple[bool, Any]:
		"""Run ``action`` (a JS ``(node, arg) => value`` function) on the resolved node: (found, value)."""
		script = (
			f'([path, arg]) => {{ const node = ({RESOLVE_PATH_JS})(path); '
			f'return node === null ? {{ found: false }} : {{ found: true, value: ({action})(node, arg) }}; }}'
		)
		result = await self.page.evaluate(script, [self.path, arg])
		return bool(result['found']), result.get('value')

	async def _act(self, action: str, arg: Any = None) -> None:
		found, _ = await self._evaluate(action, arg)
		if not found:
			raise StaleElementError(f'{self!r} is no longer in the document')

	async def text_content(self) -> str:
		if self._text is None:
			found, text = await self._evaluate('e => e.textContent || ""')
			return text if found else ''
		return self._text

	async def closest(self, selector: str) -> Optional['PlaywrightDomElement']:
		found, exists = await self._evaluate('(e, s) => e.closest(s) !== null', selector)
		if not (found and exists):
			return None
		return PlaywrightDomElement(self.page, self.path + (('closest', selector, None, None),))

	async def query_selector_all(self, selector: str) -> list['PlaywrightDomElement']:
		found, texts = await self._evaluate('(e, s) => Array.from(e.querySelectorAll(s), c => c.textContent || "")', selector)
		if not found:
			return []
		return [
			PlaywrightDomElement(self.page, self.path + (('query', selector, i, text),), text=text)
			for i, text in enumerate(texts)
		]

	async def is_clickable(self) -> bool:
		found, clickable = await self._evaluate("e => typeof e.click === 'function'")
		return found and bool(clickable)

	async def click(self) -> None:
		# DOM click, not a synthesized pointer click: no actionability waits, no scrolling.
		await self._act('e => { e.click(); }')

	async def focus(self) -> None:
		await self._act('e => { e.focus(); }')

	async def set_inner_html(self, html: str) -> None:
		await self._act('(e, html) => { e.innerHTML = html; }', html)

	async def dispatch_input_event(self) -> None:
		await self._act("e => { e.dispatchEvent(new Event('input', { bubbles: true, cancelable: true })); }")


class PlaywrightDomDocument:
	"""DomDocument over the main frame of a Playwright page."""

	def __init__(self, page: 'Page'):
		self.page = page

	async def query_selector_all(self, selector: str) -> list[PlaywrightDomElement]:
		texts = await self.page.evaluate('s => Array.from(document.querySelectorAll(s), e => e.textContent || "")', selector)
		return [PlaywrightDomElement(self.page, (('query', selector, i, text),), text=text) for i, text in enumerate(texts)]

	async def query_selector(self, selector: str) -> Optional[PlaywrightDomElement]:
		# Not pinned to its text: the input box is typed into between calls.
		if not await self.page.evaluate('s => document.querySelector(s) !== null', selector):
			return None
		return PlaywrightDomElement(self.page, (('query', selector, 0, None),))
