"""
Link extractors for the seed page.

This package contains the frame-aware link extraction strategies and the
pure deduplicate/shuffle helpers applied to each link batch.
"""

from .links import (
    AllFramesLinkExtractor,
    TopFrameLinkExtractor,
    dedupe_links,
    prepare_batch,
    shuffle_links
)

__all__ = [
    'AllFramesLinkExtractor',
    'TopFrameLinkExtractor',
    'dedupe_links',
    'prepare_batch',
    'shuffle_links'
]
