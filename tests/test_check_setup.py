"""
Tests for the setup checks that need no browser.
"""

import json
import tempfile
import unittest
from pathlib import Path

from check_setup import REQUIRED, check_collection, installed_versions
from fakes import read_warc


class TestCheckSetup(unittest.TestCase):

    def test_required_distributions_installed(self):
        versions = installed_versions()

        self.assertEqual(set(versions), set(REQUIRED))
        self.assertTrue(all(versions.values()))

    def test_collection_check_writes_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertTrue(check_collection(tmp))

            rows = [json.loads(line) for line in Path(tmp, "captures.jsonl").read_text().splitlines()]
            self.assertEqual(len(rows), 1)
            [container] = Path(tmp, "screenshots").glob("*.warc.gz")
            self.assertEqual(len(read_warc(container)), 1)

    def test_collection_check_reports_unwritable(self):
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp, "file")
            blocker.write_text("not a directory")

            self.assertFalse(check_collection(str(blocker / "collection")))


if __name__ == '__main__':
    unittest.main()
