"""
Page Session

Thin wrapper around one Playwright page for the duration of an audit.

Navigation is the only operation allowed to fail loudly. Every DOM lookup is
an *optional lookup*: it returns ``None`` (or an empty list) when the element
is absent or the query errors, so extraction code can stay declarative.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Request, Response

from app.platform.exceptions import NavigationError
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass
class NetworkLog:
    """Requests and failed responses observed while the page loaded."""
    requests: List[Dict[str, str]] = field(default_factory=list)
    failed_responses: List[Dict[str, Any]] = field(default_factory=list)

    def on_request(self, request: Request) -> None:
        self.requests.append({
            "url": request.url,
            "method": request.method,
            "resource_type": request.resource_type,
        })

    def on_response(self, response: Response) -> None:
        if not response.ok:
            self.failed_responses.append({
                "url": response.url,
                "status": response.status,
            })

    @property
    def failed_urls(self) -> set:
        return {r["url"] for r in self.failed_responses}


class PageSession:
    """Browser collaborator used by the extractor."""

    def __init__(self, page: Page):
        self.page = page
        self.network = NetworkLog()
        page.on("request", self.network.on_request)
        page.on("response", self.network.on_response)

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str, wait_until: str = "networkidle", timeout_ms: int = 30000) -> None:
        """
        Load the URL. Raises NavigationError on timeout, DNS/TLS failure or an
        error status that came back without a body.
        """
        try:
            response = await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightError as e:
            logger.warning(f"Navigation to {url} failed: {e}")
            raise NavigationError(url, str(e).splitlines()[0] if str(e) else type(e).__name__) from e

        if response is not None and response.status >= 400:
            try:
                body = await response.body()
            except PlaywrightError:
                body = b""
            if not body.strip():
                raise NavigationError(url, f"HTTP {response.status} with empty body")
            logger.info(f"{url} answered HTTP {response.status}; auditing returned content")

    async def wait_for_body(self, timeout_ms: int) -> None:
        try:
            await self.page.wait_for_selector("body", timeout=timeout_ms)
        except PlaywrightError as e:
            logger.debug(f"<body> not ready after {timeout_ms}ms: {e}")

    async def title(self) -> Optional[str]:
        try:
            return await self.page.title()
        except PlaywrightError:
            return None

    async def query_attribute(self, selector: str, attribute: str) -> Optional[str]:
        """Attribute of the first element matching selector, or None."""
        try:
            element = await self.page.query_selector(selector)
            if element is None:
                return None
            return await element.get_attribute(attribute)
        except PlaywrightError as e:
            logger.debug(f"query_attribute({selector!r}, {attribute!r}) failed: {e}")
            return None

    async def exists(self, selector: str) -> bool:
        try:
            return await self.page.query_selector(selector) is not None
        except PlaywrightError:
            return False

    async def query_all_text(self, selector: str) -> List[str]:
        """Trimmed text content of every element matching selector, in document order."""
        try:
            return await self.page.eval_on_selector_all(
                selector, "els => els.map(el => (el.textContent || '').trim())"
            )
        except PlaywrightError as e:
            logger.debug(f"query_all_text({selector!r}) failed: {e}")
            return []

    async def query_all_attributes(self, selector: str, attributes: Sequence[str]) -> List[Dict[str, Optional[str]]]:
        """One dict per matching element with the requested attributes plus its trimmed text."""
        try:
            return await self.page.eval_on_selector_all(
                selector,
                """(els, names) => els.map(el => {
                    const row = { text: (el.textContent || '').trim() };
                    for (const name of names) { row[name] = el.getAttribute(name); }
                    return row;
                })""",
                list(attributes),
            )
        except PlaywrightError as e:
            logger.debug(f"query_all_attributes({selector!r}) failed: {e}")
            return []

    async def evaluate(self, script: str, arg: Any = None) -> Optional[Any]:
        """Run an in-page measurement script; None if it throws."""
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as e:
            logger.debug(f"In-page script failed: {e}")
            return None

    async def set_viewport(self, width: int, height: int) -> None:
        try:
            await self.page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as e:
            logger.warning(f"Viewport resize to {width}x{height} failed: {e}")

    async def screenshot(self, full_page: bool = True) -> Optional[bytes]:
        """PNG bytes, or None when the capture fails (e.g. page taller than 32767px)."""
        try:
            return await self.page.screenshot(full_page=full_page, type="png")
        except PlaywrightError as e:
            logger.warning(f"Screenshot failed: {e}")
            return None
