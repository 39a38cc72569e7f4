"""
Merge of previously seen URLs into the session's seen set.

Only the seed invocation merges, and only once per session, so that links
captured in an earlier session are not queued again.
"""

import logging

logger = logging.getLogger(__name__)


class SeenListMerger:
    """Adds the persisted seen list to a shared seen set at most once."""

    def __init__(self, store):
        self.store = store
        self.merged = False

    def merge_once(self, seen: set) -> int:
        """
        Add previously seen URLs to seen.

        Args:
            seen: The frontier's seen set (modified in place)

        Returns:
            Number of URLs read from the seen list (0 if already merged or absent)
        """
        if self.merged:
            return 0
        self.merged = True

        urls = self.store.read_seen_list()
        if not urls:
            return 0

        seen.update(urls)
        logger.info(f"Added {len(urls)} previously fetched URLs to seenList (now: {len(seen)} items)")
        return len(urls)
