"""
Content classification before a URL is loaded in the browser.

Decides whether a URL is an HTML page (render and screenshot it), an
allowed binary document (fetch it directly) or something to skip.
Classification fails open: when the content type cannot be determined
the URL is treated as HTML and loaded.
"""

from enum import Enum
from typing import Optional, Dict, Callable, Awaitable
import logging

from curl_cffi.requests import AsyncSession

import capture_config

logger = logging.getLogger(__name__)


class ContentClass(Enum):
    HTML = "html"
    ALLOWED_BINARY = "allowed_binary"
    SKIP = "skip"


def media_type(content_type: Optional[str]) -> Optional[str]:
    """Strip parameters (charset etc.) from a Content-Type header value."""
    if not content_type:
        return None
    mime = content_type.split(';')[0].strip().lower()
    return mime or None


def classify_mime(mime: Optional[str]) -> ContentClass:
    """
    Map a media type to a content class.

    Args:
        mime: Media type, or None if unknown

    Returns:
        ContentClass; unknown types are loaded as HTML
    """
    mime = media_type(mime)
    if mime is None or mime in capture_config.HTML_TYPES:
        return ContentClass.HTML
    if mime in capture_config.ALLOWED_BINARY_TYPES:
        return ContentClass.ALLOWED_BINARY
    return ContentClass.SKIP


class ProbeClassifier:
    """
    Classifies URLs with a HEAD request.

    Request errors and error status codes do not block the capture,
    the page is loaded anyway.
    """

    def __init__(self, headers: Optional[Dict[str, str]] = None, proxy: Optional[str] = None,
                 timeout: float = capture_config.PROBE_TIMEOUT, session=None):
        """
        Initialize the probe.

        Args:
            headers: Extra request headers
            proxy: Proxy URL (None = direct connection)
            timeout: Request timeout in seconds
            session: curl_cffi AsyncSession to use (created on first probe if None)
        """
        self.headers = headers or {}
        self.proxy = proxy
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _get_session(self):
        if self._session is None:
            self._session = AsyncSession(impersonate="chrome120")
        return self._session

    async def get_mime_type(self, url: str) -> Optional[str]:
        """
        Probe url and return its declared media type.

        Returns:
            Media type or None (load the URL anyway)
        """
        kwargs = {
            'headers': self.headers,
            'timeout': self.timeout,
            'allow_redirects': True,
        }
        if self.proxy:
            kwargs['proxy'] = self.proxy

        try:
            resp = await self._get_session().head(url, **kwargs)
        except Exception as e:
            logger.warning(f"MIME type check error for {url}: {e}")
            return None

        if resp.status_code >= 400:
            logger.info(f"Skipping HEAD check {url}, invalid status {resp.status_code}")
            return None

        return media_type(resp.headers.get('Content-Type'))

    async def classify(self, url: str) -> ContentClass:
        return classify_mime(await self.get_mime_type(url))

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None


class DelegatedClassifier:
    """Classifies URLs with a content type lookup provided by the host."""

    def __init__(self, inspect: Callable[[str], Awaitable[Optional[str]]]):
        self.inspect = inspect

    async def classify(self, url: str) -> ContentClass:
        try:
            content_type = await self.inspect(url)
        except Exception as e:
            logger.warning(f"Content type inspection failed for {url}: {e}")
            content_type = None
        return classify_mime(content_type)

    async def close(self) -> None:
        pass
