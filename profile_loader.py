"""
Capture profile loader.

Loads and validates YAML profiles that configure a capture session:
where the collection lives, how pages are loaded and which strategies
are used for content classification and link extraction.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path
import yaml

import capture_config

CLASSIFIERS = ['probe', 'delegated']
LINK_EXTRACTIONS = ['all_frames', 'top_frame']
WAIT_CONDITIONS = ['load', 'domcontentloaded', 'networkidle', 'commit']


@dataclass
class CaptureProfile:
    """
    Complete configuration of a capture session.

    Every field falls back to the defaults in capture_config.
    """
    collection_dir: str = capture_config.COLLECTION_DIR
    seed_url: Optional[str] = None
    stats_filename: Optional[str] = None
    classifier: str = capture_config.CLASSIFIER
    probe_timeout: float = capture_config.PROBE_TIMEOUT
    wait_until: str = capture_config.WAIT_UNTIL
    timeout_ms: int = capture_config.NAVIGATION_TIMEOUT_MS
    sleep_base_seconds: float = capture_config.SLEEP_BASE_SECONDS
    skip_sleep_ms: int = capture_config.SKIP_SLEEP_MS
    max_screenshot_mb: float = capture_config.MAX_SCREENSHOT_MB
    link_extraction: str = capture_config.LINK_EXTRACTION
    link_selector: str = capture_config.LINK_SELECTOR
    workers: int = capture_config.WORKERS
    queue_limit: Optional[int] = capture_config.QUEUE_LIMIT
    headless: bool = capture_config.HEADLESS
    headers: Dict[str, str] = field(default_factory=lambda: dict(capture_config.HEADERS))
    proxy: Optional[str] = capture_config.PROXY

    def __post_init__(self):
        # statistics file lives in the collection folder unless set explicitly
        if not self.stats_filename:
            self.stats_filename = str(Path(self.collection_dir) / "stats.json")

    @property
    def max_throttle_ms(self) -> int:
        """Upper bound of the random delay before non-seed pages."""
        return int(1000 * self.sleep_base_seconds * 1.5)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CaptureProfile':
        """
        Create a CaptureProfile from a dictionary (loaded from YAML).

        Args:
            data: Dictionary from YAML file

        Returns:
            CaptureProfile instance

        Raises:
            ValueError: If fields are unknown or invalid
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown profile field(s): {', '.join(unknown)}")

        classifier = data.get('classifier', capture_config.CLASSIFIER)
        if classifier not in CLASSIFIERS:
            raise ValueError(f"Invalid classifier: {classifier}")

        link_extraction = data.get('link_extraction', capture_config.LINK_EXTRACTION)
        if link_extraction not in LINK_EXTRACTIONS:
            raise ValueError(f"Invalid link_extraction: {link_extraction}")

        wait_until = data.get('wait_until', capture_config.WAIT_UNTIL)
        if wait_until not in WAIT_CONDITIONS:
            raise ValueError(f"Invalid wait_until: {wait_until}")

        for name in ('timeout_ms', 'probe_timeout', 'workers', 'max_screenshot_mb'):
            if name in data:
                value = data[name]
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                    raise ValueError(f"'{name}' must be a positive number")

        for name in ('sleep_base_seconds', 'skip_sleep_ms'):
            if name in data:
                value = data[name]
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                    raise ValueError(f"'{name}' must be a non-negative number")

        queue_limit = data.get('queue_limit', capture_config.QUEUE_LIMIT)
        if queue_limit is not None and (not isinstance(queue_limit, int) or queue_limit < 0):
            raise ValueError("'queue_limit' must be a non-negative integer or null")

        headless = data.get('headless', capture_config.HEADLESS)
        if not isinstance(headless, bool):
            raise ValueError("'headless' must be true or false")

        headers = data.get('headers', capture_config.HEADERS)
        if not isinstance(headers, dict):
            raise ValueError("'headers' must be a dictionary")

        seed_url = data.get('seed_url')
        if seed_url is not None and (not isinstance(seed_url, str) or not seed_url.strip()):
            raise ValueError("'seed_url' must be a non-empty string")

        return cls(
            collection_dir=str(data.get('collection_dir', capture_config.COLLECTION_DIR)),
            seed_url=seed_url,
            stats_filename=data.get('stats_filename'),
            classifier=classifier,
            probe_timeout=data.get('probe_timeout', capture_config.PROBE_TIMEOUT),
            wait_until=wait_until,
            timeout_ms=int(data.get('timeout_ms', capture_config.NAVIGATION_TIMEOUT_MS)),
            sleep_base_seconds=data.get('sleep_base_seconds', capture_config.SLEEP_BASE_SECONDS),
            skip_sleep_ms=int(data.get('skip_sleep_ms', capture_config.SKIP_SLEEP_MS)),
            max_screenshot_mb=data.get('max_screenshot_mb', capture_config.MAX_SCREENSHOT_MB),
            link_extraction=link_extraction,
            link_selector=data.get('link_selector', capture_config.LINK_SELECTOR),
            workers=int(data.get('workers', capture_config.WORKERS)),
            queue_limit=queue_limit,
            headless=headless,
            headers={str(k): str(v) for k, v in headers.items()},
            proxy=data.get('proxy', capture_config.PROXY),
        )


def load_profile(file_path: str) -> CaptureProfile:
    """
    Load a capture profile from a YAML file.

    Args:
        file_path: Path to YAML profile file

    Returns:
        CaptureProfile instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If profile is invalid
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Profile file not found: {file_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    # an empty file means "all defaults"
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValueError("Profile file must contain a YAML dictionary")

    return CaptureProfile.from_dict(data)


def validate_profile(profile: CaptureProfile) -> List[str]:
    """
    Validate a profile and return a list of warnings (not errors).

    Args:
        profile: Profile to validate

    Returns:
        List of warning messages (empty if no warnings)
    """
    warnings = []

    if profile.seed_url and not profile.seed_url.startswith(('http://', 'https://')):
        warnings.append(f"Seed URL may be invalid (missing http/https): {profile.seed_url}")

    if profile.sleep_base_seconds == 0:
        warnings.append("sleep_base_seconds is 0 - pages after the seed are fetched without delay")

    if profile.timeout_ms < 10000:
        warnings.append(f"timeout_ms is very low: {profile.timeout_ms}")

    if profile.queue_limit and profile.queue_limit > 10000:
        warnings.append(f"queue_limit is very high: {profile.queue_limit}")

    if profile.workers > 16:
        warnings.append(f"Many concurrent browser pages: {profile.workers}")

    return warnings
