import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.platform.browser import BrowserManager


def fake_playwright():
    browser = MagicMock()
    browser.is_connected.return_value = True
    browser.close = AsyncMock()

    context = MagicMock()
    context.close = AsyncMock()
    browser.new_context = AsyncMock(return_value=context)

    async def slow_launch(**kwargs):
        await asyncio.sleep(0.01)
        return browser

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(side_effect=slow_launch)
    playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    return starter, playwright, browser, context


class TestBrowserManager:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_launch(self):
        starter, playwright, browser, _ = fake_playwright()
        manager = BrowserManager(launch_args=["--no-sandbox"])

        with patch("app.platform.browser.async_playwright", return_value=starter):
            browsers = await asyncio.gather(*[manager.get_browser() for _ in range(5)])

        assert all(b is browser for b in browsers)
        assert manager.launch_count == 1
        playwright.chromium.launch.assert_awaited_once_with(headless=True, args=["--no-sandbox"])

    @pytest.mark.asyncio
    async def test_context_closed_on_error(self):
        starter, _, browser, context = fake_playwright()
        manager = BrowserManager(user_agent="PageAudit/1.0", viewport_width=1280, viewport_height=720)

        with patch("app.platform.browser.async_playwright", return_value=starter):
            with pytest.raises(RuntimeError):
                async with manager.new_context():
                    raise RuntimeError("extraction blew up")

        browser.new_context.assert_awaited_once_with(
            viewport={"width": 1280, "height": 720}, user_agent="PageAudit/1.0"
        )
        context.close.assert_awaited_once()
        assert manager.is_running

    @pytest.mark.asyncio
    async def test_close_stops_everything(self):
        starter, playwright, browser, _ = fake_playwright()
        manager = BrowserManager()

        with patch("app.platform.browser.async_playwright", return_value=starter):
            await manager.get_browser()
            await manager.close()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert manager.is_running is False

    @pytest.mark.asyncio
    async def test_relaunch_after_disconnect(self):
        starter, _, browser, _ = fake_playwright()
        manager = BrowserManager()

        with patch("app.platform.browser.async_playwright", return_value=starter):
            await manager.get_browser()
            browser.is_connected.return_value = False
            await manager.get_browser()

        assert manager.launch_count == 2
