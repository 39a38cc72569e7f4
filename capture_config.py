"""
Configuration defaults for the seed capture driver.

Values here are used whenever a capture profile (YAML) does not override them.
"""

# Collection directory - all output files of a session are written below it
COLLECTION_DIR = "collections/capture"

# Media types treated as HTML and loaded in the browser
HTML_TYPES = ["text/html", "application/xhtml", "application/xhtml+xml"]

# Non-HTML media types that are still captured (via direct fetch)
# Everything else that is not HTML is skipped
ALLOWED_BINARY_TYPES = ["application/pdf"]

# Content classification strategy
# "probe" = HEAD request before loading the page
# "delegated" = ask the host (browser context) for the content type
CLASSIFIER = "probe"

# Timeout in seconds for the HEAD probe
PROBE_TIMEOUT = 20

# Page load condition passed to the browser: load, domcontentloaded, networkidle, commit
WAIT_UNTIL = "load"

# Navigation timeout in milliseconds
NAVIGATION_TIMEOUT_MS = 90000

# Base sleep time in seconds before every non-seed page
# The actual delay is drawn from [base / 2, base * 1.5)
SLEEP_BASE_SECONDS = 60

# Sleep in milliseconds after skipped or directly fetched (non-HTML) URLs
SKIP_SLEEP_MS = 5000

# Full page screenshots larger than this are not written
MAX_SCREENSHOT_MB = 8

# Extra time in seconds allowed per invocation for screenshots and link extraction
SCREENSHOT_ALLOWANCE_SECONDS = 60

# Link extraction strategy
# "all_frames" = collect links from the page and all child frames
# "top_frame" = collect links from the top-level document only
LINK_EXTRACTION = "all_frames"

# CSS selector for links on the seed page
LINK_SELECTOR = "a[href]"

# Number of browser pages processing URLs concurrently
WORKERS = 1

# Maximum number of URLs accepted into the queue (None = unlimited)
QUEUE_LIMIT = None

# Browser headless mode
HEADLESS = True

# Extra HTTP headers sent with the probe and the browser requests
HEADERS = {}

# Proxy server for probe and browser, e.g. "http://localhost:8080" (None = direct)
PROXY = None

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]
