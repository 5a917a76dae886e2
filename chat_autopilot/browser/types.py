# centralize imports for browser typing

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

__all__ = [
	'Browser',
	'BrowserContext',
	'Page',
	'Playwright',
	'PlaywrightError',
	'PlaywrightTimeoutError',
	'async_playwright',
]
