"""
Playwright browser for rendering listing and product pages.

Provides the PageFactory/PageAccessor implementation used in production:
one Chromium instance per crawl, one short-lived tab per page visit.
"""

import asyncio
from typing import Optional, Any, Dict
from playwright.async_api import async_playwright, Browser, BrowserContext, Page
import logging

from .base import PageAccessor, PageFactory

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'


class BrowserPage(PageAccessor):
    """PageAccessor backed by a Playwright page."""

    def __init__(self, page: Page):
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, wait_until: str = 'load', timeout_ms: int = 30000) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        await self._page.wait_for_selector(selector, state='attached', timeout=timeout_ms)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        if arg is None:
            return await self._page.evaluate(expression)
        return await self._page.evaluate(expression, arg)

    async def click(self, selector: str) -> None:
        await self._page.click(selector)

    async def content(self) -> str:
        return await self._page.content()

    async def close(self) -> None:
        try:
            await asyncio.wait_for(self._page.close(), timeout=2.0)
        except asyncio.TimeoutError:
            logger.warning("Page close timed out")


class BrowserCrawler(PageFactory):
    """
    Chromium browser shared by all pages of one crawl.

    Usage:
        async with BrowserCrawler(headless=True) as browser:
            page = await browser.new_page()
            await page.goto(url)
    """

    def __init__(
        self,
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        page_timeout: float = 10.0
    ):
        """
        Initialize the browser wrapper.

        Args:
            headless: Run browser in headless mode
            viewport: Page viewport size, defaults to 1920x1080
            user_agent: User agent for every page
            page_timeout: Seconds allowed for opening a new tab
        """
        self.headless = headless
        self.viewport = viewport or {'width': 1920, 'height': 1080}
        self.user_agent = user_agent
        self.page_timeout = page_timeout
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._playwright = None

    async def _init_browser(self):
        """Start Playwright and launch Chromium if not already running."""
        if self._browser is not None and self._browser.is_connected():
            return

        try:
            self._playwright = await async_playwright().start()

            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--disable-blink-features=AutomationControlled',
                    '--disable-dev-shm-usage',
                    '--no-sandbox',
                ],
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )

            if not self._browser.is_connected():
                raise Exception("Browser launched but not connected")

            self._context = await self._browser.new_context(
                viewport=self.viewport,
                user_agent=self.user_agent,
                locale='en-US',
            )
            logger.debug("Browser initialization successful")

        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            await self._cleanup()
            raise

    async def _cleanup(self):
        """Close browser resources with timeouts to prevent hanging."""
        cleanup_timeout = 2.0

        if self._context:
            try:
                await asyncio.wait_for(self._context.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    async def new_page(self) -> BrowserPage:
        """
        Open a fresh tab in the shared browser context.

        Raises:
            Exception: If the browser is unresponsive
        """
        await self._init_browser()
        try:
            page = await asyncio.wait_for(self._context.new_page(), timeout=self.page_timeout)
        except asyncio.TimeoutError:
            raise Exception("Timeout creating new page - browser may be unresponsive")
        return BrowserPage(page)

    async def close(self):
        """Close the browser and cleanup resources."""
        await self._cleanup()

    async def __aenter__(self):
        await self._init_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._cleanup()
