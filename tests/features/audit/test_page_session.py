from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from app.features.audit.schemas.audit import AuditOptions
from app.features.audit.services.browser.page_session import NetworkLog, PageSession
from app.features.audit.services.extraction.extractor_service import ExtractorService
from app.platform.exceptions import NavigationError


def make_page():
    page = MagicMock()
    page.url = "https://claystudio.test/"
    return page


def make_response(status=200, body=b"<html></html>", url="https://claystudio.test/"):
    response = MagicMock()
    response.status = status
    response.ok = status < 400
    response.url = url
    response.body = AsyncMock(return_value=body)
    return response


class TestNavigate:
    @pytest.mark.asyncio
    async def test_success(self):
        page = make_page()
        page.goto = AsyncMock(return_value=make_response())
        session = PageSession(page)

        await session.navigate("https://claystudio.test/", timeout_ms=5000)

        page.goto.assert_awaited_once_with("https://claystudio.test/", wait_until="networkidle", timeout=5000)

    @pytest.mark.asyncio
    async def test_timeout_becomes_navigation_error(self):
        page = make_page()
        page.goto = AsyncMock(side_effect=PlaywrightError("Timeout 30000ms exceeded.\n=== logs ==="))
        session = PageSession(page)

        with pytest.raises(NavigationError) as exc_info:
            await session.navigate("https://slow.test/")

        assert exc_info.value.reason == "Timeout 30000ms exceeded."

    @pytest.mark.asyncio
    async def test_error_status_without_body_fails(self):
        page = make_page()
        page.goto = AsyncMock(return_value=make_response(status=503, body=b"  "))
        session = PageSession(page)

        with pytest.raises(NavigationError) as exc_info:
            await session.navigate("https://claystudio.test/")

        assert "HTTP 503" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_error_status_with_body_is_audited(self):
        page = make_page()
        page.goto = AsyncMock(return_value=make_response(status=404, body=b"<h1>Not found</h1>"))
        session = PageSession(page)

        await session.navigate("https://claystudio.test/missing")


class TestOptionalLookups:
    @pytest.mark.asyncio
    async def test_missing_element_returns_none(self):
        page = make_page()
        page.query_selector = AsyncMock(return_value=None)
        session = PageSession(page)

        assert await session.query_attribute('meta[name="description"]', "content") is None
        assert await session.exists('meta[name="viewport"]') is False

    @pytest.mark.asyncio
    async def test_attribute_value(self):
        element = MagicMock()
        element.get_attribute = AsyncMock(return_value="width=device-width")
        page = make_page()
        page.query_selector = AsyncMock(return_value=element)
        session = PageSession(page)

        assert await session.query_attribute('meta[name="viewport"]', "content") == "width=device-width"
        element.get_attribute.assert_awaited_once_with("content")

    @pytest.mark.asyncio
    async def test_errors_are_absorbed(self):
        page = make_page()
        page.query_selector = AsyncMock(side_effect=PlaywrightError("Execution context was destroyed"))
        page.eval_on_selector_all = AsyncMock(side_effect=PlaywrightError("Execution context was destroyed"))
        page.evaluate = AsyncMock(side_effect=PlaywrightError("boom"))
        page.title = AsyncMock(side_effect=PlaywrightError("boom"))
        session = PageSession(page)

        assert await session.query_attribute("title", "content") is None
        assert await session.exists("body") is False
        assert await session.query_all_text("h1") == []
        assert await session.query_all_attributes("a", ["href"]) == []
        assert await session.evaluate("() => 1") is None
        assert await session.title() is None

    @pytest.mark.asyncio
    async def test_screenshot_and_viewport_errors_are_absorbed(self):
        page = make_page()
        page.screenshot = AsyncMock(side_effect=PlaywrightError("Cannot take screenshot larger than 32767 pixels"))
        page.set_viewport_size = AsyncMock(side_effect=PlaywrightError("Target closed"))
        session = PageSession(page)

        assert await session.screenshot(full_page=True) is None
        await session.set_viewport(375, 667)


class TestCollectOverPageSession:
    @pytest.mark.asyncio
    async def test_failed_capture_keeps_the_audit(self):
        page = make_page()
        page.goto = AsyncMock(return_value=make_response())
        page.wait_for_selector = AsyncMock()
        page.evaluate = AsyncMock(return_value=None)
        page.title = AsyncMock(return_value="Very tall page")
        page.query_selector = AsyncMock(return_value=None)
        page.eval_on_selector_all = AsyncMock(return_value=[])
        page.set_viewport_size = AsyncMock()
        page.screenshot = AsyncMock(side_effect=[
            PlaywrightError("Cannot take screenshot larger than 32767 pixels"),
            b"\x89PNG mobile",
        ])
        session = PageSession(page)

        result = await ExtractorService.collect(
            session, "https://claystudio.test/", AuditOptions(include_screenshots=True)
        )

        assert result.seo.title.content == "Very tall page"
        assert result.screenshots.desktop is None
        assert result.screenshots.mobile.startswith("data:image/png;base64,")
        assert result.screenshots.timestamp
        page.set_viewport_size.assert_awaited_once_with({"width": 375, "height": 667})


class TestNetworkLog:
    def test_records_requests_and_failures(self):
        log = NetworkLog()
        request = MagicMock(url="https://claystudio.test/app.js", method="GET", resource_type="script")
        log.on_request(request)
        log.on_response(make_response(status=200))
        log.on_response(make_response(status=404, url="https://claystudio.test/gone"))

        assert log.requests == [
            {"url": "https://claystudio.test/app.js", "method": "GET", "resource_type": "script"}
        ]
        assert log.failed_responses == [{"url": "https://claystudio.test/gone", "status": 404}]
        assert log.failed_urls == {"https://claystudio.test/gone"}

    def test_session_subscribes_to_page_events(self):
        page = make_page()
        session = PageSession(page)
        events = [call.args[0] for call in page.on.call_args_list]
        assert events == ["request", "response"]
        assert session.url == "https://claystudio.test/"
