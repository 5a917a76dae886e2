import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from chat_autopilot.browser.types import Page

logger = logging.getLogger(__name__)

# Links inside the chat app open new windows by default; keep navigation in the current window.
SAME_WINDOW_LINKS_JS = """
(() => {
  if (window.__chatAutopilotSameWindowLinks) return false;
  window.__chatAutopilotSameWindowLinks = true;
  document.addEventListener('click', (event) => {
    const link = event.target && event.target.closest ? event.target.closest('a') : null;
    if (!link || !link.href) return;
    event.preventDefault();
    window.location.href = link.href;
  });
  return true;
})()
"""


async def install_same_window_links(page: 'Page') -> bool:
	"""Install the click interceptor on the current document and on every future navigation.

	Returns True when the listener was added to the current document, False when it was
	already present.
	"""
	await page.add_init_script(SAME_WINDOW_LINKS_JS)
	installed = bool(await page.evaluate(SAME_WINDOW_LINKS_JS))
	if installed:
		logger.info('🔗 Same-window link interception installed')
	else:
		logger.debug('Same-window link interception already present')
	return installed
