"""
Capture Driver

Processes one URL handed over by the frontier:
- classifies the content before loading it (HTML, PDF or skip)
- sleeps a random time before any page after the seed
- loads the page and records the capture
- writes a viewport and a full page screenshot (deduplicated)
- on the seed page only: queues the shuffled links of the page

Many invocations may run concurrently (one browser page each); they share
the collection files and the frontier's seen set.
"""

import logging
import random
from typing import List, Optional

from classifiers import ContentClass, DelegatedClassifier, ProbeClassifier
from extractors import AllFramesLinkExtractor, TopFrameLinkExtractor, prepare_batch
from persistence import CaptureEvent, SeenListMerger, utc_timestamp
from profile_loader import CaptureProfile
from screenshots import ScreenshotRecorder
from throttle import Throttle

logger = logging.getLogger(__name__)


class CaptureDriver:
    """Decision-and-capture pipeline for single URLs."""

    def __init__(self, page, frontier, host, store, profile: CaptureProfile,
                 classifier, link_extractor, seen_merger: SeenListMerger,
                 rng: Optional[random.Random] = None):
        """
        Initialize the capture driver.

        Args:
            page: PageHandle the URL is loaded in
            frontier: FrontierHandle (queue, seen set, sleep)
            host: CaptureHost (direct fetch of non-HTML content)
            store: EventLogger for capture events, link batches and screenshots
            profile: Capture settings
            classifier: Content classification strategy
            link_extractor: Link extraction strategy
            seen_merger: Shared merge of the previous session's seen list
            rng: Random source for sleep times and link shuffling
        """
        self.page = page
        self.frontier = frontier
        self.host = host
        self.store = store
        self.profile = profile
        self.classifier = classifier
        self.link_extractor = link_extractor
        self.seen_merger = seen_merger
        self.rng = rng or random.Random()

        self.throttle = Throttle(frontier, profile.sleep_base_seconds, self.rng)
        self.screenshots = ScreenshotRecorder(page, store, profile.max_screenshot_mb)

    def _write_capture(self, url: str, timestamp: Optional[str], is_seed: bool, is_html: bool) -> None:
        self.store.write_capture(CaptureEvent(url, timestamp, is_seed, is_html))

    async def process(self, url: str, is_seed: Optional[bool] = None) -> None:
        """
        Run the whole pipeline for url.

        Args:
            url: URL to capture
            is_seed: Whether url is the seed; if None, the URL counts as
                the seed while the seen set holds at most one entry
                (single-seed crawls)

        Raises:
            OSError: If a capture event cannot be written
        """
        if is_seed is None:
            is_seed = len(self.frontier.seen) <= 1

        content_class = await self.classifier.classify(url)
        if content_class is not ContentClass.HTML:
            await self._handle_non_html(url, content_class, is_seed)
            return

        await self.throttle.wait(url, is_seed)

        await self._capture_page(url, is_seed)

        await self.screenshots.capture(url)

        if not is_seed:
            # links are extracted only from the seed (crawl depth 1)
            return

        self.seen_merger.merge_once(self.frontier.seen)
        await self.discover_links(url)

    async def _handle_non_html(self, url: str, content_class: ContentClass, is_seed: bool) -> None:
        if content_class is ContentClass.ALLOWED_BINARY:
            timestamp = None
            try:
                await self.host.direct_fetch_capture(url)
                timestamp = utc_timestamp()
            except Exception as e:
                logger.error(f"Direct fetch failed for {url}: {e}")
            self._write_capture(url, timestamp, is_seed, False)
        else:
            logger.info(f"Skip fetching non-HTML content {url}")
            # mark as visited so the URL is not inspected again
            self._write_capture(url, None, is_seed, False)

        # minimal sleep, the browser might even load PDFs etc.
        await self.frontier.sleep(self.profile.skip_sleep_ms)

    async def _capture_page(self, url: str, is_seed: bool) -> bool:
        """
        Load url in the page and record the capture.

        Returns:
            True if the page loaded, False on navigation errors (logged)
        """
        logger.info(f"Fetching HTML page {url}")
        try:
            await self.page.navigate(url, wait_until=self.profile.wait_until,
                                     timeout=self.profile.timeout_ms)
        except Exception as e:
            logger.warning(f"Load timeout for {url}: {e}")
            return False

        self._write_capture(url, utc_timestamp(), is_seed, True)
        return True

    async def discover_links(self, url: str) -> Optional[List[str]]:
        """
        Extract, shuffle and queue the links of the current page.

        Returns:
            The queued batch, or None if extraction failed
        """
        links = await self.link_extractor.extract(self.page, url)
        if links is None:
            return None

        batch = prepare_batch(links, url, self.rng)

        # dump link list for debugging
        self.store.append_links(batch)

        self.frontier.queue_urls(batch)
        return batch


def build_classifier(profile: CaptureProfile, host):
    """Create the content classifier selected by the profile."""
    if profile.classifier == 'delegated':
        return DelegatedClassifier(host.inspect_content_type)
    return ProbeClassifier(headers=profile.headers, proxy=profile.proxy,
                           timeout=profile.probe_timeout)


def build_link_extractor(profile: CaptureProfile):
    """Create the link extractor selected by the profile."""
    if profile.link_extraction == 'top_frame':
        return TopFrameLinkExtractor(profile.link_selector)
    return AllFramesLinkExtractor(profile.link_selector)


def build_driver(page, frontier, host, store, profile: CaptureProfile,
                 seen_merger: SeenListMerger, rng: Optional[random.Random] = None) -> CaptureDriver:
    """
    Create a CaptureDriver with the strategies configured in profile.

    Args:
        page: PageHandle for this driver
        frontier: Shared FrontierHandle
        host: CaptureHost
        store: Shared EventLogger
        profile: Capture settings
        seen_merger: Shared SeenListMerger (one per session)
        rng: Random source

    Returns:
        CaptureDriver instance
    """
    return CaptureDriver(
        page=page,
        frontier=frontier,
        host=host,
        store=store,
        profile=profile,
        classifier=build_classifier(profile, host),
        link_extractor=build_link_extractor(profile),
        seen_merger=seen_merger,
        rng=rng
    )
