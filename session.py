"""
Capture Session

Runs the capture driver against a real browser, starting from one seed URL:
- the seed page is captured and its links are queued (in random order)
- every queued page is captured after a random sleep, no further links
- a previous session's seen list (urls-seen.json) keeps old links out

Usage:
    python session.py --url https://example.com
    python session.py --profile profiles/example.yaml --workers 4 --limit 50
"""

import argparse
import asyncio
import io
import logging
import random
import sys
from pathlib import Path
from typing import Optional, Sequence

from curl_cffi.requests import AsyncSession
from playwright.async_api import async_playwright
from warcio.statusandheaders import StatusAndHeaders
from warcio.warcwriter import WARCWriter

import capture_config
from capture_driver import build_driver
from handles import PlaywrightPage
from persistence import CollectionStore, SeenListMerger
from profile_loader import CaptureProfile, load_profile, validate_profile

logger = logging.getLogger(__name__)

ANTI_DETECT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', {get: () => undefined});
"""

# headers describing the transfer, not the archived payload
HOP_HEADERS = {'content-encoding', 'transfer-encoding', 'content-length', 'connection'}


class SessionFrontier:
    """
    Minimal frontier for one capture session.

    Tracks seen URLs, enforces the queue limit and hands URLs to the workers.
    """

    def __init__(self, limit: Optional[int] = None):
        self.seen = set()
        self.queue = asyncio.Queue()
        self.limit = limit
        self.queued = 0
        self.crawled = 0
        self.limit_hit = False

    def add_seed(self, url: str) -> None:
        self.seen.add(url)
        self.queue.put_nowait((url, True))

    def queue_urls(self, urls: Sequence[str]) -> None:
        """Queue unseen http(s) URLs until the limit is reached."""
        added = 0
        for url in urls:
            if not url.startswith(('http://', 'https://')):
                continue
            if url in self.seen:
                continue
            if self.limit is not None and self.queued >= self.limit:
                self.limit_hit = True
                break
            self.seen.add(url)
            self.queue.put_nowait((url, False))
            self.queued += 1
            added += 1
        logger.info(f"Queued {added} of {len(urls)} URLs ({self.queue.qsize()} pending)")

    async def sleep(self, ms: int) -> None:
        await asyncio.sleep(ms / 1000)

    def stats(self) -> dict:
        pending = self.queue.qsize()
        return {
            'crawled': self.crawled,
            'total': self.crawled + pending,
            'pending': pending,
            'limit': {'max': self.limit or 0, 'hit': self.limit_hit}
        }


class DirectFetcher:
    """Fetches non-HTML resources without the browser and archives the response."""

    def __init__(self, store: CollectionStore, headers=None, proxy: Optional[str] = None,
                 timeout: float = 120, session=None):
        self.store = store
        self.headers = headers or {}
        self.proxy = proxy
        self.timeout = timeout
        self.session = session or AsyncSession(impersonate="chrome120")

    async def fetch(self, url: str) -> None:
        """
        Download url and append it as a WARC response record.

        Raises:
            Exception: On network errors or error status codes
        """
        kwargs = {'headers': self.headers, 'timeout': self.timeout, 'allow_redirects': True}
        if self.proxy:
            kwargs['proxy'] = self.proxy

        resp = await self.session.get(url, **kwargs)
        resp.raise_for_status()

        body = resp.content
        headers = [(k, v) for k, v in resp.headers.items() if k.lower() not in HOP_HEADERS]
        headers.append(('Content-Length', str(len(body))))
        status_line = f"{resp.status_code} {resp.reason or ''}".strip()
        http_headers = StatusAndHeaders(status_line, headers, protocol='HTTP/1.1')

        buf = io.BytesIO()
        writer = WARCWriter(buf, gzip=True, warc_version='WARC/1.1')
        record = writer.create_warc_record(
            resp.url or url, 'response',
            payload=io.BytesIO(body),
            length=len(body),
            http_headers=http_headers
        )
        writer.write_record(record)

        path = self.store.new_archive_container()
        self.store.append_bytes(path, buf.getvalue())
        logger.info(f"Direct fetch of {url} written to {path} ({len(body)} bytes)")

    async def close(self) -> None:
        await self.session.close()


class WorkerHost:
    """CaptureHost of one worker: direct fetch plus the page's content type lookup."""

    def __init__(self, page: PlaywrightPage, fetcher: DirectFetcher, probe_timeout: float):
        self.page = page
        self.fetcher = fetcher
        self.probe_timeout = probe_timeout

    async def direct_fetch_capture(self, url: str) -> None:
        await self.fetcher.fetch(url)

    async def inspect_content_type(self, url: str) -> Optional[str]:
        return await self.page.inspect_content_type(url, timeout=int(self.probe_timeout * 1000))


class CaptureSession:
    """Runs a seed capture with a pool of browser pages."""

    def __init__(self, profile: CaptureProfile, rng: Optional[random.Random] = None):
        self.profile = profile
        self.rng = rng or random.Random()
        self.store = CollectionStore(profile.collection_dir, profile.stats_filename)
        self.frontier = SessionFrontier(profile.queue_limit)
        self.seen_merger = SeenListMerger(self.store)

    @property
    def invocation_timeout(self) -> float:
        """Seconds one URL may take: page load plus maximum sleep plus screenshots."""
        return (self.profile.timeout_ms + self.profile.max_throttle_ms) / 1000 \
            + capture_config.SCREENSHOT_ALLOWANCE_SECONDS

    async def _new_context(self, browser):
        vw = 1920 + self.rng.randint(-100, 100)
        vh = 1080 + self.rng.randint(-100, 100)
        return await browser.new_context(
            viewport={"width": vw, "height": vh},
            user_agent=(
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            locale="en-US",
            timezone_id="America/New_York",
            extra_http_headers=self.profile.headers or None,
        )

    async def _worker(self, index: int, context, fetcher: DirectFetcher) -> None:
        page = await context.new_page()
        await page.add_init_script(ANTI_DETECT_SCRIPT)
        handle = PlaywrightPage(page)
        host = WorkerHost(handle, fetcher, self.profile.probe_timeout)
        driver = build_driver(handle, self.frontier, host, self.store, self.profile,
                              self.seen_merger, random.Random(self.rng.random()))
        try:
            while True:
                url, is_seed = await self.frontier.queue.get()
                try:
                    await asyncio.wait_for(driver.process(url, is_seed=is_seed),
                                           timeout=self.invocation_timeout)
                    self.frontier.crawled += 1
                except asyncio.TimeoutError:
                    logger.error(f"[worker {index}] Capture of {url} timed out")
                except Exception as e:
                    logger.error(f"[worker {index}] Capture of {url} failed: {e}")
                finally:
                    self.frontier.queue.task_done()
        finally:
            await driver.classifier.close()
            try:
                await page.close()
            except Exception as e:
                logger.debug(f"Could not close page: {e}")

    async def run(self, seed_url: str) -> dict:
        """
        Capture seed_url and the links found on it.

        Returns:
            Session statistics (also written to the stats file)
        """
        self.frontier.add_seed(seed_url)
        fetcher = DirectFetcher(self.store, self.profile.headers, self.profile.proxy)

        launch_options = {'headless': self.profile.headless, 'args': capture_config.BROWSER_ARGS}
        if self.profile.proxy:
            launch_options['proxy'] = {'server': self.profile.proxy}

        async with async_playwright() as p:
            browser = await p.chromium.launch(**launch_options)
            mode = "headless" if self.profile.headless else "visible"
            logger.info(f"Playwright browser initialized ({mode} mode, {self.profile.workers} workers)")
            context = await self._new_context(browser)

            workers = [
                asyncio.create_task(self._worker(i, context, fetcher))
                for i in range(self.profile.workers)
            ]
            try:
                await self.frontier.queue.join()
            finally:
                for task in workers:
                    task.cancel()
                await asyncio.gather(*workers, return_exceptions=True)
                await fetcher.close()
                await context.close()
                await browser.close()

        self.store.save_seen_list(self.frontier.seen)
        stats = self.frontier.stats()
        self.store.save_stats(stats)
        logger.info(f"Session complete! Captured {stats['crawled']} URLs")
        return stats


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description='Capture a seed page, its screenshots and linked pages')
    parser.add_argument('--url', help='Seed URL (overrides the profile)')
    parser.add_argument('--profile', help='Capture profile YAML file')
    parser.add_argument('--collection', help='Collection directory')
    parser.add_argument('--workers', type=int, help='Number of concurrent browser pages')
    parser.add_argument('--limit', type=int, help='Maximum number of queued links')
    parser.add_argument('--headless', action='store_true', help='Run browser in headless mode')
    parser.add_argument('--visible', action='store_true', help='Run browser in visible mode')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        profile = load_profile(args.profile) if args.profile else CaptureProfile()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid profile: {e}")
        sys.exit(1)

    if args.url:
        profile.seed_url = args.url
    if args.collection:
        profile.collection_dir = args.collection
        profile.stats_filename = str(Path(args.collection) / "stats.json")
    if args.workers:
        profile.workers = args.workers
    if args.limit is not None:
        profile.queue_limit = args.limit
    if args.headless:
        profile.headless = True
    elif args.visible:
        profile.headless = False

    if not profile.seed_url:
        logger.error("No seed URL! Use --url or set seed_url in the profile")
        sys.exit(1)

    for warning in validate_profile(profile):
        logger.warning(warning)

    asyncio.run(CaptureSession(profile).run(profile.seed_url))


if __name__ == "__main__":
    main()
