"""
Browser automation collaborator used by the scraper.

The extractor only talks to the small `BrowserSession` protocol below, so
tests can substitute a fake page. `PlaywrightSessionFactory` is the
production implementation: one headless Chromium per session, configured to
look like an ordinary desktop browser.
"""

from __future__ import annotations

import logging

from typing import Any, Dict, List, Optional, Protocol

from playwright.async_api import Browser, Error as PlaywrightError, Page, Playwright, async_playwright

from apps.rankings_ingestion.config import ScraperConfig, get_scraper_config
from apps.rankings_ingestion.errors import PageExtractionError

logger = logging.getLogger(__name__)

LAUNCH_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--window-size=1920,1080",
]

EXTRA_HTTP_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

VIEWPORT: Dict[str, int] = {"width": 1920, "height": 1080}


class BrowserSession(Protocol):
    """Capabilities the scraper needs from one browser page."""

    async def navigate(self, url: str, timeout_ms: int) -> None:
        """Load `url`; raises PageExtractionError on failure or timeout."""

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        """Wait for a visible element; False if it did not appear in time."""

    async def evaluate(self, script: str) -> Any:
        """Run a DOM routine in the page and return its result."""

    async def content(self) -> str:
        """Current page markup; raises PageExtractionError if it cannot be read."""

    async def screenshot(self) -> bytes:
        """PNG screenshot of the current viewport."""

    async def close(self) -> None:
        """Release the browser; safe to call more than once."""


class BrowserSessionFactory(Protocol):
    async def launch(self) -> BrowserSession:
        """Start a new, exclusively owned browser session."""


class PlaywrightSession:
    """BrowserSession backed by a Playwright Chromium page."""

    def __init__(self, playwright: Playwright, browser: Browser, page: Page) -> None:
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._closed = False

    async def navigate(self, url: str, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightError as e:
            raise PageExtractionError(f"Navigation to {url} failed: {e}") from e

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self._page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
            return True
        except PlaywrightError:
            return False

    async def evaluate(self, script: str) -> Any:
        try:
            return await self._page.evaluate(script)
        except PlaywrightError as e:
            raise PageExtractionError(f"Page script failed: {e}") from e

    async def content(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as e:
            raise PageExtractionError(f"Page content unavailable: {e}") from e

    async def screenshot(self) -> bytes:
        try:
            return await self._page.screenshot()
        except PlaywrightError as e:
            raise PageExtractionError(f"Screenshot failed: {e}") from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightSessionFactory:
    """Launches headless Chromium sessions with realistic client settings."""

    def __init__(self, config: Optional[ScraperConfig] = None) -> None:
        self.config = config or get_scraper_config()

    async def launch(self) -> PlaywrightSession:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.config.headless,
                args=LAUNCH_ARGS,
                executable_path=self.config.executable_path,
            )
            context = await browser.new_context(
                user_agent=self.config.user_agent,
                viewport=VIEWPORT,
                extra_http_headers=EXTRA_HTTP_HEADERS,
                java_script_enabled=True,
            )
            context.set_default_navigation_timeout(self.config.navigation_timeout_ms)
            context.set_default_timeout(self.config.wait_timeout_ms)
            page = await context.new_page()
        except Exception:
            await playwright.stop()
            raise

        logger.debug(f"Launched Chromium session (headless={self.config.headless})")
        return PlaywrightSession(playwright, browser, page)
