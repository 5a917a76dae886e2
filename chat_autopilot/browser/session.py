from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from chat_autopilot.browser.links import install_same_window_links
from chat_autopilot.browser.types import Browser, BrowserContext, Page, Playwright, PlaywrightError, async_playwright
from chat_autopilot.exceptions import BrowserConnectionError

logger = logging.getLogger(__name__)


class BrowserSession:
	"""Owns the Playwright connection to the chat application.

	Either attaches to an already running Chromium/Electron app through its remote debugging
	port (``cdp_url``) or launches a persistent Chromium context. A browser we only attached to
	is never closed on stop.
	"""

	def __init__(
		self,
		cdp_url: Optional[str] = None,
		start_url: Optional[str] = None,
		page_url_contains: Optional[str] = None,
		user_data_dir: Optional[str] = None,
		headless: bool = False,
		same_window_links: bool = False,
		cdp_ready_timeout: float = 30.0,
	):
		self.cdp_url = cdp_url.rstrip('/') + '/' if cdp_url else None
		self.start_url = start_url
		self.page_url_contains = page_url_contains
		self.user_data_dir = user_data_dir
		self.headless = headless
		self.same_window_links = same_window_links
		self.cdp_ready_timeout = cdp_ready_timeout

		self.playwright: Optional[Playwright] = None
		self.browser: Optional[Browser] = None
		self.browser_context: Optional[BrowserContext] = None
		self.page: Optional[Page] = None
		self._owns_browser = False

	@property
	def _connection_str(self) -> str:
		return f'cdp={self.cdp_url}' if self.cdp_url else f'local user_data_dir={self.user_data_dir}'

	async def start(self) -> Page:
		if self.page is not None:
			return self.page

		try:
			if self.cdp_url:
				await self._wait_for_cdp()
			self.playwright = await async_playwright().start()
			if self.cdp_url:
				await self.setup_browser_via_cdp_url()
			else:
				await self.setup_new_browser_context()
			self.page = await self._pick_page()
			if self.same_window_links:
				await install_same_window_links(self.page)
		except BrowserConnectionError:
			await self.stop()
			raise
		except PlaywrightError as e:
			await self.stop()
			raise BrowserConnectionError(f'Failed to start browser session ({self._connection_str}): {e}') from e

		logger.info(f'📄 Autopilot attached to page {self.page.url}')
		return self.page

	async def _wait_for_cdp(self) -> None:
		"""Poll /json/version until the remote debugging endpoint answers."""
		assert self.cdp_url is not None
		attempts = max(1, int(self.cdp_ready_timeout / 0.5))
		async with httpx.AsyncClient() as client:
			for i in range(attempts):
				try:
					response = await client.get(f'{self.cdp_url}json/version', timeout=1.0)
					if response.status_code == 200:
						return
				except (httpx.ConnectError, httpx.TimeoutException):
					if i == 0:
						logger.debug(f'⏳ Waiting for CDP endpoint {self.cdp_url} to become available...')
				except (httpx.HTTPError, httpx.InvalidURL) as e:
					# Malformed URL or protocol failure: retrying will not help
					raise BrowserConnectionError(f'CDP endpoint {self.cdp_url} is not usable: {type(e).__name__}: {e}') from e
				await asyncio.sleep(0.5)
		raise BrowserConnectionError(f'CDP endpoint {self.cdp_url} did not become available after {self.cdp_ready_timeout:.0f} seconds')

	async def setup_browser_via_cdp_url(self) -> None:
		"""Connect to a running chromium-based browser or Electron app via CDP."""
		logger.info(f'🌎 Connecting to existing chromium-based browser via CDP: {self.cdp_url}')
		assert self.playwright is not None, 'playwright instance is None'
		self.browser = await self.playwright.chromium.connect_over_cdp(self.cdp_url)
		self._owns_browser = False
		if self.browser.contexts:
			self.browser_context = self.browser.contexts[0]
		else:
			self.browser_context = await self.browser.new_context()

	async def setup_new_browser_context(self) -> None:
		"""Launch a persistent chromium context; the profile dir survives between runs when given."""
		if not self.user_data_dir:
			self.user_data_dir = tempfile.mkdtemp(prefix='chat-autopilot-profile-')
		profile_path = Path(self.user_data_dir)
		profile_path.mkdir(parents=True, exist_ok=True)

		logger.info(f'🌎 Launching local chromium: user_data_dir={profile_path} headless={self.headless}')
		assert self.playwright is not None, 'playwright instance is None'
		self.browser_context = await self.playwright.chromium.launch_persistent_context(
			str(profile_path),
			headless=self.headless,
		)
		self._owns_browser = True

	async def _pick_page(self) -> Page:
		assert self.browser_context is not None
		pages = [page for page in self.browser_context.pages if not page.is_closed()]
		if self.page_url_contains:
			for page in pages:
				if self.page_url_contains in page.url:
					return page
			if self.cdp_url:
				raise BrowserConnectionError(
					f'No page with "{self.page_url_contains}" in its URL; open pages: {[p.url for p in pages]}'
				)

		page = pages[0] if pages else await self.browser_context.new_page()
		if self.start_url:
			await page.goto(self.start_url, wait_until='load')
		return page

	async def stop(self) -> None:
		"""Release Playwright; only closes the browser when this session launched it."""
		try:
			if self._owns_browser and self.browser_context is not None:
				logger.info(f'🛑 Closing {self._connection_str} browser context')
				await self.browser_context.close()
			elif self.browser is not None:
				logger.debug(f'🔗 Detaching from {self._connection_str}, leaving the browser running')
		except PlaywrightError as e:
			logger.warning(f'⚠️ Error while closing browser context: {type(e).__name__}: {e}')
		finally:
			self.browser = None
			self.browser_context = None
			self.page = None
			if self.playwright is not None:
				await self.playwright.stop()
				self.playwright = None
