"""
Screenshot capture into WARC resource records.

Every captured page gets a viewport screenshot and, when it adds something,
a full page screenshot. Both go into one gzipped WARC file per page, as
resource records with the target URI urn:screenshot:<page url>.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple
import base64
import hashlib
import io
import logging

from warcio.timeutils import datetime_to_iso_date
from warcio.warcwriter import WARCWriter

import capture_config

logger = logging.getLogger(__name__)

WARC_VERSION = "WARC/1.1"
SCREENSHOT_URN_PREFIX = "urn:screenshot:"


def payload_digest(data: bytes) -> str:
    """WARC payload digest (sha1, base32) of data."""
    return "sha1:" + base64.b32encode(hashlib.sha1(data).digest()).decode('ascii')


def serialize_screenshot(url: str, date: str, png: bytes) -> Tuple[bytes, str]:
    """
    Wrap a PNG screenshot into a gzipped WARC resource record.

    Args:
        url: URL of the page shown in the screenshot
        date: WARC-Date shared by all screenshots of one capture
        png: Screenshot image

    Returns:
        (serialized record, payload digest)
    """
    digest = payload_digest(png)
    buf = io.BytesIO()
    writer = WARCWriter(buf, gzip=True, warc_version=WARC_VERSION)
    record = writer.create_warc_record(
        SCREENSHOT_URN_PREFIX + url,
        'resource',
        payload=io.BytesIO(png),
        length=len(png),
        warc_content_type='image/png',
        warc_headers_dict={
            'WARC-Date': date,
            'WARC-Payload-Digest': digest,
        }
    )
    writer.write_record(record)
    return buf.getvalue(), digest


@dataclass
class ScreenshotResult:
    path: Path
    records_written: int = 0


class ScreenshotRecorder:
    """Takes the screenshot pair of a page and writes what is worth keeping."""

    def __init__(self, page, store, max_size_mb: float = capture_config.MAX_SCREENSHOT_MB):
        self.page = page
        self.store = store
        self.max_size_mb = max_size_mb

    async def _take(self, url: str, date: str, full_page: bool) -> Tuple[bytes, str]:
        png = await self.page.screenshot(full_page=full_page, omit_background=True)
        return serialize_screenshot(url, date, png)

    async def capture(self, url: str) -> Optional[ScreenshotResult]:
        """
        Write the viewport screenshot, then the full page one unless it is
        oversized or identical to the viewport screenshot.

        Errors are logged and never raised.

        Returns:
            ScreenshotResult, or None if no container path could be created
        """
        result = None
        try:
            result = ScreenshotResult(path=self.store.new_screenshot_container())
            # naive UTC, warcio appends the Z itself
            date = datetime_to_iso_date(datetime.now(timezone.utc).replace(tzinfo=None), use_micros=True)

            record, digest = await self._take(url, date, full_page=False)
            self.store.append_bytes(result.path, record)
            result.records_written += 1
            logger.info(f"Screenshot for {url} written to {result.path} ({len(record)} bytes)")

            record, full_digest = await self._take(url, date, full_page=True)
            if len(record) > self.max_size_mb * 2**20:
                logger.info(f"Skipping full page screenshot for {url} "
                            f"(overlong, exceeding {self.max_size_mb} MiB)")
            elif full_digest == digest:
                logger.info(f"Skipping full page screenshot for {url} (identical to simple screenshot)")
            else:
                self.store.append_bytes(result.path, record)
                result.records_written += 1
                logger.info(f"Full page screenshot for {url} written to {result.path} ({len(record)} bytes)")
        except Exception as e:
            logger.warning(f"Screenshots failed for {url}: {e}")

        return result
