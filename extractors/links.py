"""
Link extraction from the rendered seed page.

Links are collected in the browser (so relative URLs are already resolved),
deduplicated and shuffled. Shuffling makes repeated crawls of a page whose
links change frequently reach links further down the page, even when a
queue limit truncates the batch.
"""

from typing import List, Optional, Sequence, Iterable
import asyncio
import logging
import random

logger = logging.getLogger(__name__)

# evaluated inside each frame, returns absolute hrefs
LINKS_SCRIPT = """
(selector) => [...document.querySelectorAll(selector)].map(elem => elem.href)
"""


def dedupe_links(links: Iterable[str]) -> List[str]:
    """
    Remove duplicate URLs (exact string match), keeping first occurrences.

    Args:
        links: URLs in document order

    Returns:
        List of unique URLs
    """
    return list(dict.fromkeys(links))


def shuffle_links(links: List[str], rng: Optional[random.Random] = None) -> List[str]:
    """
    Shuffle links in place (Fisher-Yates) and return them.

    Args:
        links: List to shuffle
        rng: Random source (module-level random if None)

    Returns:
        The same list, shuffled
    """
    rng = rng or random
    for i in range(len(links) - 1, 0, -1):
        j = rng.randint(0, i)
        links[i], links[j] = links[j], links[i]
    return links


def _as_links(value) -> List[str]:
    """Keep only non-empty string hrefs from an evaluation result."""
    if not value:
        return []
    return [link for link in value if isinstance(link, str) and link]


class AllFramesLinkExtractor:
    """
    Collects links from the page and every child frame.

    A frame that fails (detached, cross-origin error, ...) is skipped,
    links from the other frames are kept.
    """

    def __init__(self, selector: str = "a[href]"):
        self.selector = selector

    async def extract(self, page, url: str) -> Optional[List[str]]:
        frames = list(page.list_frames())
        results = await asyncio.gather(
            *(frame.evaluate(LINKS_SCRIPT, self.selector) for frame in frames),
            return_exceptions=True
        )

        links = []
        for frame, result in zip(frames, results):
            if isinstance(result, BaseException):
                logger.warning(f"Link extraction failed for a frame of {url}: {result}")
                continue
            links.extend(_as_links(result))
        return links


class TopFrameLinkExtractor:
    """Collects links from the top-level document only; any error drops the batch."""

    def __init__(self, selector: str = "a[href]"):
        self.selector = selector

    async def extract(self, page, url: str) -> Optional[List[str]]:
        try:
            result = await page.main_frame().evaluate(LINKS_SCRIPT, self.selector)
        except Exception as e:
            logger.warning(f"Link Extraction failed for {url}: {e}")
            return None
        return _as_links(result)


def prepare_batch(links: Sequence[str], url: str,
                  rng: Optional[random.Random] = None) -> List[str]:
    """
    Deduplicate and shuffle extracted links.

    Args:
        links: Extracted links (may contain duplicates)
        url: Page the links were extracted from (for logging)
        rng: Random source

    Returns:
        Shuffled list of unique links
    """
    unique = dedupe_links(links)
    logger.info(f"Extracted {len(links)} links ({len(unique)} unique) from {url}")
    return shuffle_links(unique, rng)
