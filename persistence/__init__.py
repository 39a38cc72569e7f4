"""
Persistence layer for capture sessions.

This package provides the append-only collection store (capture events,
link batches, screenshot containers) and the merge of previously seen URLs.
"""

from .collection_store import CaptureEvent, CollectionStore, EventLogger, utc_timestamp
from .seen_list import SeenListMerger

__all__ = ['CaptureEvent', 'CollectionStore', 'EventLogger', 'SeenListMerger', 'utc_timestamp']
