"""
Unit tests for the collection store and the seen list merge.
"""

import json
import re
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from persistence import CaptureEvent, CollectionStore, SeenListMerger, utc_timestamp


class TestCaptureLog(unittest.TestCase):
    """Test captures.jsonl and links.json."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = CollectionStore(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def read_lines(self, path):
        with open(path, 'r', encoding='utf-8') as f:
            return [json.loads(line) for line in f]

    def test_capture_event_format(self):
        self.store.write_capture(CaptureEvent("https://a.com/", "2024-05-01T10:00:00.000Z", True, True))
        self.store.write_capture(CaptureEvent("https://a.com/v.mp4", None, False, False))

        rows = self.read_lines(self.store.captures_file)

        self.assertEqual(rows, [
            {"url": "https://a.com/", "timestamp": "2024-05-01T10:00:00.000Z", "isSeed": True, "isHTML": True},
            {"url": "https://a.com/v.mp4", "timestamp": None, "isSeed": False, "isHTML": False},
        ])

    def test_link_batches_are_lines(self):
        self.store.append_links(["https://a.com/2", "https://a.com/1"])
        self.store.append_links([])

        self.assertEqual(self.read_lines(self.store.links_file), [["https://a.com/2", "https://a.com/1"], []])

    def test_concurrent_appends_keep_lines_whole(self):
        url = "https://example.com/" + "x" * 2000

        def write(i):
            self.store.write_capture(CaptureEvent(f"{url}?n={i}", utc_timestamp(), False, True))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(write, range(400)))

        rows = self.read_lines(self.store.captures_file)
        self.assertEqual(len(rows), 400)
        self.assertEqual({row["url"] for row in rows}, {f"{url}?n={i}" for i in range(400)})

    def test_append_error_propagates(self):
        self.store.captures_file.mkdir()

        with self.assertRaises(OSError):
            self.store.write_capture(CaptureEvent("https://a.com/", None, True, False))

    def test_default_paths(self):
        root = Path(self.tmp.name)
        self.assertEqual(self.store.stats_file, root / "stats.json")
        self.assertEqual(self.store.seen_list_file, root / "urls-seen.json")

        path = self.store.new_screenshot_container()
        self.assertEqual(path.parent, root / "screenshots")
        self.assertTrue(path.name.endswith(".warc.gz"))
        self.assertFalse(path.exists())
        self.assertNotEqual(path, self.store.new_screenshot_container())

    def test_custom_stats_file(self):
        stats = Path(self.tmp.name) / "other" / "stats.json"
        store = CollectionStore(self.tmp.name, str(stats))

        store.save_stats({"crawled": 1})

        self.assertEqual(json.loads(stats.read_text()), {"crawled": 1})


class TestUtcTimestamp(unittest.TestCase):

    def test_format(self):
        self.assertRegex(utc_timestamp(), re.compile(r"^\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z$"))


class TestSeenList(unittest.TestCase):
    """Test reading and merging the previous session's seen list."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = CollectionStore(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file(self):
        self.assertIsNone(self.store.read_seen_list())

        seen = {"https://a.com/"}
        self.assertEqual(SeenListMerger(self.store).merge_once(seen), 0)
        self.assertEqual(seen, {"https://a.com/"})

    def test_corrupt_file_is_ignored(self):
        self.store.seen_list_file.write_text("[not json")
        self.assertIsNone(self.store.read_seen_list())

        self.store.seen_list_file.write_text('{"url": "https://a.com/"}')
        self.assertIsNone(self.store.read_seen_list())

    def test_merge(self):
        self.store.save_seen_list(["https://a.com/1", "https://a.com/2", "https://a.com/"])
        seen = {"https://a.com/"}

        added = SeenListMerger(self.store).merge_once(seen)

        self.assertEqual(added, 3)
        self.assertEqual(seen, {"https://a.com/", "https://a.com/1", "https://a.com/2"})

    def test_merge_only_once(self):
        self.store.save_seen_list(["https://a.com/1"])
        merger = SeenListMerger(self.store)
        seen = set()

        merger.merge_once(seen)
        self.store.save_seen_list(["https://a.com/1", "https://a.com/new"])
        self.assertEqual(merger.merge_once(seen), 0)

        self.assertEqual(seen, {"https://a.com/1"})

    def test_repeated_merge_does_not_grow_set(self):
        self.store.save_seen_list(["https://a.com/1", "https://a.com/2"])
        seen = set()

        SeenListMerger(self.store).merge_once(seen)
        SeenListMerger(self.store).merge_once(seen)

        self.assertEqual(len(seen), 2)


if __name__ == '__main__':
    unittest.main()
