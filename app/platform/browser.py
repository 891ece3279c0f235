"""
Shared Browser Manager

Owns the single Playwright Chromium instance used by every audit in the
process. The browser is launched lazily on first use and lives until
``close()`` is called (application shutdown).

Each audit gets its own BrowserContext so cookies, listeners and viewport
changes never leak between concurrent audits. Contexts are handed out through
an async context manager and are always closed on exit.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class BrowserManager:
    """
    Lazily-launched, process-wide browser with a single-flight launch guard.

    Concurrent callers that arrive while the browser is still starting wait on
    the same lock instead of launching their own instance.
    """

    def __init__(
        self,
        headless: bool = True,
        launch_args: Optional[List[str]] = None,
        user_agent: Optional[str] = None,
        viewport_width: int = 1920,
        viewport_height: int = 1080,
    ):
        self.headless = headless
        self.launch_args = list(launch_args or [])
        self.user_agent = user_agent
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height

        self._lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self.launch_count = 0

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def _launch(self) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
            logger.info("Playwright driver started")

        browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=self.launch_args,
        )
        self.launch_count += 1
        logger.info(f"Chromium launched (launch #{self.launch_count}, headless={self.headless})")
        return browser

    async def get_browser(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        if self.is_running:
            return self._browser

        async with self._lock:
            # Another coroutine may have finished launching while we waited
            if not self.is_running:
                self._browser = await self._launch()
            return self._browser

    @asynccontextmanager
    async def new_context(self) -> AsyncIterator[BrowserContext]:
        """
        Yield an isolated browsing context for one audit.

        The context is closed on every exit path; the shared browser stays up.
        """
        browser = await self.get_browser()
        context_params = {
            "viewport": {"width": self.viewport_width, "height": self.viewport_height},
        }
        if self.user_agent:
            context_params["user_agent"] = self.user_agent

        context = await browser.new_context(**context_params)
        try:
            yield context
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

    async def close(self) -> None:
        """Close the shared browser and stop Playwright."""
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                    logger.info("Chromium closed")
                except Exception as e:
                    logger.warning(f"Error closing browser: {e}")
                finally:
                    self._browser = None

            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                    logger.info("Playwright driver stopped")
                except Exception as e:
                    logger.warning(f"Error stopping Playwright: {e}")
                finally:
                    self._playwright = None


_browser_manager: Optional[BrowserManager] = None


def get_browser_manager() -> BrowserManager:
    """Process-wide BrowserManager built from settings."""
    global _browser_manager
    if _browser_manager is None:
        _browser_manager = BrowserManager(
            headless=settings.BROWSER_HEADLESS,
            launch_args=settings.BROWSER_ARGS,
            user_agent=settings.BROWSER_USER_AGENT,
            viewport_width=settings.DESKTOP_VIEWPORT_WIDTH,
            viewport_height=settings.DESKTOP_VIEWPORT_HEIGHT,
        )
    return _browser_manager


async def shutdown_browser() -> None:
    global _browser_manager
    if _browser_manager is not None:
        await _browser_manager.close()
        _browser_manager = None
