"""Headless browser service backed by Playwright.

One chromium instance and one browsing context are shared for the life of
the server; each visit gets a fresh page from ``open_page()``, which closes
it on every exit path.

Example:
    browser = BrowserService(headless=True)
    async with browser.open_page() as page:
        await page.navigate("https://example.com")
        html = await page.content()
    await browser.close()
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from research_mcp.config.research import DEFAULT_USER_AGENT
from research_mcp.core.errors.research import BrowserUnavailableError

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 720}


class BrowserPage:
    """A single open page. Obtain through ``BrowserService.open_page()``."""

    def __init__(self, page: Page, navigation_timeout_ms: float) -> None:
        self._page = page
        self._timeout_ms = navigation_timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, wait_until: str = "load") -> None:
        start = time.perf_counter()
        await self._page.goto(url, wait_until=wait_until, timeout=self._timeout_ms)
        logger.debug("Navigated to %s in %.0fms", url, (time.perf_counter() - start) * 1000)

    async def content(self) -> str:
        return await self._page.content()

    async def screenshot(self, full_page: bool = False) -> bytes:
        return await self._page.screenshot(full_page=full_page, type="png")


class BrowserService:
    """Lazily launched shared chromium instance."""

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        navigation_timeout: float = 30.0,
    ) -> None:
        self._headless = headless
        self._user_agent = user_agent
        self._navigation_timeout_ms = navigation_timeout * 1000
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._launch_lock = asyncio.Lock()

    async def _ensure_context(self) -> BrowserContext:
        async with self._launch_lock:
            if self._context is not None and self._browser is not None and self._browser.is_connected():
                return self._context

            logger.info("Launching chromium (headless=%s)", self._headless)
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(headless=self._headless)
                self._context = await self._browser.new_context(
                    user_agent=self._user_agent,
                    viewport=VIEWPORT,
                    locale="en-US",
                )
            except Exception as exc:
                raise BrowserUnavailableError(f"Failed to launch chromium: {exc}") from exc
            return self._context

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[BrowserPage]:
        """Open a fresh page and guarantee it is closed afterwards."""
        context = await self._ensure_context()
        page = await context.new_page()
        try:
            yield BrowserPage(page, self._navigation_timeout_ms)
        finally:
            try:
                await page.close()
            except Exception as exc:
                logger.debug("Ignoring error while closing page: %s", exc)

    async def fetch_html(self, url: str, wait_until: str = "load") -> str:
        async with self.open_page() as page:
            await page.navigate(url, wait_until=wait_until)
            return await page.content()

    async def screenshot(self, url: str, full_page: bool = False) -> bytes:
        async with self.open_page() as page:
            await page.navigate(url, wait_until="networkidle")
            return await page.screenshot(full_page=full_page)

    async def close(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser closed")
