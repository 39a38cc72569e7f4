"""
Verify that a machine can run capture sessions.

Usage:
    python check_setup.py [profile.yaml]
"""

import asyncio
import sys
import tempfile
from importlib import metadata

# distribution name -> import name
REQUIRED = {
    'playwright': 'playwright',
    'curl_cffi': 'curl_cffi',
    'warcio': 'warcio',
    'PyYAML': 'yaml',
}


def installed_versions():
    """Map each required distribution to its installed version (None if missing)."""
    versions = {}
    for dist in REQUIRED:
        try:
            versions[dist] = metadata.version(dist)
        except metadata.PackageNotFoundError:
            versions[dist] = None
    return versions


def check_dependencies():
    versions = installed_versions()
    for dist, version in versions.items():
        print(f"  {dist}: {version or 'MISSING'}")
    missing = [dist for dist, version in versions.items() if version is None]
    if missing:
        print(f"Install with: pip install {' '.join(missing)}")
    return not missing


def check_collection(collection_dir):
    """Write a capture event and a screenshot record to collection_dir."""
    from persistence import CaptureEvent, CollectionStore, utc_timestamp
    from screenshots import serialize_screenshot

    try:
        store = CollectionStore(collection_dir)
        store.write_capture(CaptureEvent("https://example.com/", utc_timestamp(), True, True))
        record, _ = serialize_screenshot("https://example.com/", "2024-01-01T00:00:00Z", b"png")
        store.append_bytes(store.new_screenshot_container(), record)
    except OSError as e:
        print(f"  Collection {collection_dir} is not writable: {e}")
        return False
    print(f"  Collection {collection_dir} is writable")
    return True


async def _render_blank_page():
    from playwright.async_api import async_playwright

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            await page.goto("about:blank")
            return await page.screenshot(full_page=True)
        finally:
            await browser.close()


def check_browser():
    try:
        png = asyncio.run(_render_blank_page())
    except Exception as e:
        print(f"  Chromium cannot take screenshots: {e}")
        print("  Install it with: playwright install chromium")
        return False
    print(f"  Chromium screenshot OK ({len(png)} bytes)")
    return True


def main():
    collection_dir = None
    if len(sys.argv) > 1:
        from profile_loader import load_profile
        collection_dir = load_profile(sys.argv[1]).collection_dir

    print("Dependencies:")
    results = [check_dependencies()]

    print("Collection:")
    if collection_dir:
        results.append(check_collection(collection_dir))
    else:
        with tempfile.TemporaryDirectory() as tmp:
            results.append(check_collection(tmp))

    print("Browser:")
    results.append(check_browser())

    if not all(results):
        sys.exit(1)
    print("Ready: python session.py --url https://example.com --limit 5")


if __name__ == "__main__":
    main()
