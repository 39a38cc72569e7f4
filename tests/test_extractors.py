"""
Unit tests for link extraction, deduplication and shuffling.

Frames are faked, no browser is needed.
"""

import random
import unittest
from collections import Counter

from extractors import (
    AllFramesLinkExtractor,
    TopFrameLinkExtractor,
    dedupe_links,
    prepare_batch,
    shuffle_links
)
from fakes import FakeFrame, FakePage


class TestDedupeLinks(unittest.TestCase):
    """Test link deduplication."""

    def test_removes_exact_duplicates(self):
        links = ["https://a.com/1", "https://a.com/2", "https://a.com/1"]
        self.assertEqual(dedupe_links(links), ["https://a.com/1", "https://a.com/2"])

    def test_exact_string_match_only(self):
        """URLs differing only by a trailing slash or fragment stay distinct."""
        links = ["https://a.com/x", "https://a.com/x/", "https://a.com/x#top"]
        self.assertEqual(len(dedupe_links(links)), 3)

    def test_empty(self):
        self.assertEqual(dedupe_links([]), [])


class TestShuffleLinks(unittest.TestCase):
    """Test the Fisher-Yates shuffle."""

    def test_is_permutation(self):
        links = [f"https://a.com/{i}" for i in range(50)]
        shuffled = shuffle_links(list(links), random.Random(7))

        self.assertEqual(sorted(shuffled), sorted(links))
        self.assertNotEqual(shuffled, links)

    def test_shuffles_in_place(self):
        links = ["a", "b", "c"]
        self.assertIs(shuffle_links(links, random.Random(1)), links)

    def test_short_lists(self):
        self.assertEqual(shuffle_links([]), [])
        self.assertEqual(shuffle_links(["only"]), ["only"])

    def test_no_position_bias(self):
        """Every link ends up first about equally often."""
        rng = random.Random(1234)
        runs = 6000
        first = Counter()
        last = Counter()
        for _ in range(runs):
            shuffled = shuffle_links(["a", "b", "c"], rng)
            first[shuffled[0]] += 1
            last[shuffled[-1]] += 1

        for counts in (first, last):
            for link in ("a", "b", "c"):
                self.assertGreater(counts[link], runs / 3 - 300)
                self.assertLess(counts[link], runs / 3 + 300)

    def test_all_orders_occur(self):
        rng = random.Random(99)
        orders = {tuple(shuffle_links(["a", "b", "c"], rng)) for _ in range(600)}
        self.assertEqual(len(orders), 6)


class TestPrepareBatch(unittest.TestCase):
    """Test dedup + shuffle of an extracted batch."""

    def test_unique_and_complete(self):
        raw = [f"https://a.com/{i % 12}" for i in range(15)]
        batch = prepare_batch(raw, "https://a.com/", random.Random(3))

        self.assertEqual(len(batch), 12)
        self.assertEqual(len(set(batch)), 12)
        self.assertEqual(set(batch), set(raw))


class TestAllFramesLinkExtractor(unittest.IsolatedAsyncioTestCase):
    """Test extraction from the page and all child frames."""

    async def test_merges_frames(self):
        page = FakePage(frames=[
            FakeFrame(["https://a.com/1", "https://a.com/2"]),
            FakeFrame(["https://b.com/1"]),
        ])

        links = await AllFramesLinkExtractor("a.nav").extract(page, "https://a.com/")

        self.assertEqual(links, ["https://a.com/1", "https://a.com/2", "https://b.com/1"])
        self.assertEqual(page.frames[0].selectors, ["a.nav"])
        self.assertEqual(page.frames[1].selectors, ["a.nav"])

    async def test_failing_frame_is_isolated(self):
        page = FakePage(frames=[
            FakeFrame(["https://a.com/1"]),
            FakeFrame(error=RuntimeError("Frame was detached")),
            FakeFrame(["https://c.com/1"]),
        ])

        links = await AllFramesLinkExtractor().extract(page, "https://a.com/")

        self.assertEqual(links, ["https://a.com/1", "https://c.com/1"])

    async def test_ignores_empty_values(self):
        page = FakePage(frames=[FakeFrame(["https://a.com/1", "", None])])

        links = await AllFramesLinkExtractor().extract(page, "https://a.com/")

        self.assertEqual(links, ["https://a.com/1"])


class TestTopFrameLinkExtractor(unittest.IsolatedAsyncioTestCase):
    """Test extraction from the top-level document only."""

    async def test_main_frame_only(self):
        page = FakePage(frames=[
            FakeFrame(["https://a.com/1"]),
            FakeFrame(["https://b.com/1"]),
        ])

        links = await TopFrameLinkExtractor().extract(page, "https://a.com/")

        self.assertEqual(links, ["https://a.com/1"])
        self.assertEqual(page.frames[1].selectors, [])

    async def test_error_drops_batch(self):
        page = FakePage(frames=[FakeFrame(error=RuntimeError("Execution context was destroyed"))])

        self.assertIsNone(await TopFrameLinkExtractor().extract(page, "https://a.com/"))


if __name__ == '__main__':
    unittest.main()
