"""
Fixtures for end-to-end tests against a real Chromium driven by Playwright.
"""

import contextlib

import pytest

from chat_autopilot.browser.types import PlaywrightError, async_playwright


@pytest.fixture
def chromium_page():
    """Factory for a headless page loaded with the given HTML; skips when Chromium is unavailable."""

    @contextlib.asynccontextmanager
    async def open_page(html: str):
        async with async_playwright() as p:
            try:
                browser = await p.chromium.launch(headless=True)
            except PlaywrightError as e:
                pytest.skip(f"Chromium not available for e2e tests: {e}")
            try:
                page = await browser.new_page()
                await page.set_content(html)
                yield page
            finally:
                await browser.close()

    return open_page
