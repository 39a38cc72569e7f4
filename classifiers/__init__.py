"""
Content classifiers.

Strategies that decide, before loading, whether a URL is captured as an
HTML page, fetched directly as an allowed binary document, or skipped.
"""

from .content_type import (
    ContentClass,
    DelegatedClassifier,
    ProbeClassifier,
    classify_mime,
    media_type
)

__all__ = [
    'ContentClass',
    'DelegatedClassifier',
    'ProbeClassifier',
    'classify_mime',
    'media_type'
]
