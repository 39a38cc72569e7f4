"""
Collaborator interfaces of the capture driver.

The driver never reaches into the browser or the scheduler directly; it
talks to the narrow interfaces below. PlaywrightPage adapts a Playwright
page, tests use small fakes.
"""

from typing import Protocol, Any, List, Optional, Sequence, Set

from playwright.async_api import Page, Frame


class FrameHandle(Protocol):
    """A document inside the page (the top-level document or a child frame)."""

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        ...


class PageHandle(Protocol):
    """The browser page a capture runs in."""

    async def navigate(self, url: str, wait_until: str, timeout: int) -> None:
        """Load url; raises on navigation errors and timeouts."""
        ...

    async def screenshot(self, full_page: bool, omit_background: bool = True) -> bytes:
        """Render the current page state as PNG."""
        ...

    def list_frames(self) -> Sequence[FrameHandle]:
        """All frames of the page, the main frame included."""
        ...

    def main_frame(self) -> FrameHandle:
        """The top-level document."""
        ...


class FrontierHandle(Protocol):
    """The scheduler that feeds URLs in and accepts discovered URLs."""

    seen: Set[str]

    def queue_urls(self, urls: Sequence[str]) -> None:
        """Accept a batch of URLs; seen tracking and limits are the frontier's job."""
        ...

    async def sleep(self, ms: int) -> None:
        ...


class CaptureHost(Protocol):
    """Capabilities of the host process beyond page loading."""

    async def direct_fetch_capture(self, url: str) -> None:
        """Fetch and archive url without rendering it in the browser."""
        ...

    async def inspect_content_type(self, url: str) -> Optional[str]:
        """Return the media type the server declares for url, if any."""
        ...


class PlaywrightPage:
    """PageHandle on top of a Playwright (async API) page."""

    def __init__(self, page: Page):
        self.page = page

    async def navigate(self, url: str, wait_until: str, timeout: int) -> None:
        await self.page.goto(url, wait_until=wait_until, timeout=timeout)

    async def screenshot(self, full_page: bool, omit_background: bool = True) -> bytes:
        return await self.page.screenshot(full_page=full_page, omit_background=omit_background)

    def list_frames(self) -> List[Frame]:
        return list(self.page.frames)

    def main_frame(self) -> Frame:
        return self.page.main_frame

    async def inspect_content_type(self, url: str, timeout: int = 20000) -> Optional[str]:
        """
        Ask the browser context for the content type of url (HEAD request).

        Shares cookies and proxy settings with the page.

        Returns:
            Content-Type header value, or None if the request failed
        """
        response = await self.page.context.request.fetch(
            url, method="HEAD", timeout=timeout, fail_on_status_code=False
        )
        try:
            if response.status >= 400:
                return None
            return response.headers.get('content-type')
        finally:
            await response.dispose()
