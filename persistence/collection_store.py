"""
Append-only storage for a capture collection.

All files of a session live below one collection directory:

    captures.jsonl              one capture event per line
    links.json                  one shuffled link batch (JSON array) per line
    urls-seen.json              seen URLs of a previous session
    screenshots/<uuid>.warc.gz  screenshot records of one page capture
    archive/<uuid>.warc.gz      directly fetched (non-HTML) resources

Concurrent capture tasks may interleave whole records, never parts of one:
every append is a single write of a fully formed record, serialized per file.
"""

from typing import Protocol, Dict, Any, List, Optional, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
import json
import logging
import threading
import uuid

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass
class CaptureEvent:
    """One visited URL and how it was handled."""
    url: str
    timestamp: Optional[str]
    is_seed: bool
    is_html: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the dictionary written to captures.jsonl."""
        return {
            'url': self.url,
            'timestamp': self.timestamp,
            'isSeed': self.is_seed,
            'isHTML': self.is_html
        }


class EventLogger(Protocol):
    """
    Interface the capture driver uses for everything it persists.

    Callers never touch the filesystem directly, so tests can substitute
    an in-memory implementation.
    """

    def write_capture(self, event: CaptureEvent) -> None:
        """Append a capture event."""
        ...

    def append_links(self, links: Sequence[str]) -> None:
        """Append a link batch to the debug link list."""
        ...

    def new_screenshot_container(self) -> Path:
        """Return the path of a fresh screenshot WARC file."""
        ...

    def append_bytes(self, path: Path, data: bytes) -> None:
        """Append one serialized record to path."""
        ...

    def read_seen_list(self) -> Optional[List[str]]:
        """Return URLs seen in a previous session, None if there are none."""
        ...


class CollectionStore:
    """
    File based implementation of EventLogger.

    Uses JSONL for capture events and link batches and gzipped WARC
    files for screenshots.
    """

    def __init__(self, collection_dir: str = "collections/capture",
                 stats_filename: Optional[str] = None):
        """
        Initialize the collection store.

        Args:
            collection_dir: Directory for all output files
            stats_filename: Statistics file (default: stats.json in the collection)
        """
        self.collection_dir = Path(collection_dir)
        self.collection_dir.mkdir(parents=True, exist_ok=True)

        self.captures_file = self.collection_dir / "captures.jsonl"
        self.links_file = self.collection_dir / "links.json"
        self.seen_list_file = self.collection_dir / "urls-seen.json"
        self.screenshots_dir = self.collection_dir / "screenshots"
        self.archive_dir = self.collection_dir / "archive"
        self.stats_file = Path(stats_filename) if stats_filename else self.collection_dir / "stats.json"

        # only the shared logs need serializing, a container has a single writer
        self._locks: Dict[Path, threading.Lock] = {
            self.captures_file: threading.Lock(),
            self.links_file: threading.Lock(),
        }

    def append_bytes(self, path: Path, data: bytes) -> None:
        """
        Append one complete record to a file.

        Raises:
            OSError: If the file cannot be written (not retried)
        """
        path = Path(path)
        lock = self._locks.get(path)
        if lock is None:
            with open(path, 'ab') as f:
                f.write(data)
            return

        with lock:
            with open(path, 'ab') as f:
                f.write(data)

    def _append_json_line(self, path: Path, obj: Any) -> None:
        line = json.dumps(obj) + '\n'
        self.append_bytes(path, line.encode('utf-8'))

    def write_capture(self, event: CaptureEvent) -> None:
        """Append a capture event to captures.jsonl."""
        self._append_json_line(self.captures_file, event.to_dict())

    def append_links(self, links: Sequence[str]) -> None:
        """Append a link batch as one JSON array line to links.json."""
        self._append_json_line(self.links_file, list(links))

    def new_screenshot_container(self) -> Path:
        """Path of a new screenshot WARC file (created on first append)."""
        self.screenshots_dir.mkdir(exist_ok=True)
        return self.screenshots_dir / f"{uuid.uuid4()}.warc.gz"

    def new_archive_container(self) -> Path:
        """Path of a new WARC file for directly fetched resources."""
        self.archive_dir.mkdir(exist_ok=True)
        return self.archive_dir / f"{uuid.uuid4()}.warc.gz"

    def read_seen_list(self) -> Optional[List[str]]:
        """
        Load the seen URLs persisted by a previous session.

        Returns:
            List of URLs, or None if there is no (usable) seen list
        """
        if not self.seen_list_file.exists():
            return None

        try:
            with open(self.seen_list_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load seen list {self.seen_list_file}: {e}")
            return None

        if not isinstance(data, list):
            logger.warning(f"Ignoring seen list {self.seen_list_file}: not a JSON array")
            return None

        return [item for item in data if isinstance(item, str)]

    def save_seen_list(self, urls) -> None:
        """Persist the seen URLs for the next session."""
        with open(self.seen_list_file, 'w', encoding='utf-8') as f:
            json.dump(sorted(urls), f, indent=2)

    def save_stats(self, stats: Dict[str, Any]) -> None:
        """Write the statistics file."""
        self.stats_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.stats_file, 'w', encoding='utf-8') as f:
            json.dump(stats, f, indent=2)
