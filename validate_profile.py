"""
Simple script to validate a capture profile.

Usage:
    python validate_profile.py profiles/example.yaml
"""

import sys
import logging

from profile_loader import load_profile, validate_profile

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def main():
    if len(sys.argv) < 2:
        print("Usage: python validate_profile.py <profile_file>")
        sys.exit(1)

    profile_file = sys.argv[1]

    try:
        logger.info(f"Loading profile: {profile_file}")
        profile = load_profile(profile_file)

        logger.info("✓ Profile loaded successfully")
        logger.info(f"  Seed URL: {profile.seed_url or '(none, pass --url)'}")
        logger.info(f"  Collection: {profile.collection_dir}")
        logger.info(f"  Stats file: {profile.stats_filename}")
        logger.info(f"  Classifier: {profile.classifier}")
        logger.info(f"  Link extraction: {profile.link_extraction} ({profile.link_selector})")
        logger.info(f"  Wait until: {profile.wait_until}, timeout {profile.timeout_ms} ms")
        logger.info(f"  Random sleep: {profile.sleep_base_seconds / 2:g}-{profile.sleep_base_seconds * 1.5:g} s")
        logger.info(f"  Workers: {profile.workers}")
        if profile.queue_limit is not None:
            logger.info(f"  Queue limit: {profile.queue_limit}")
        if profile.proxy:
            logger.info(f"  Proxy: {profile.proxy}")

        warnings = validate_profile(profile)
        if warnings:
            logger.warning("Validation warnings:")
            for warning in warnings:
                logger.warning(f"  - {warning}")
        else:
            logger.info("✓ No validation warnings")

        logger.info("")
        logger.info("Profile is valid and ready to use!")
        logger.info(f"Run with: python session.py --profile {profile_file}")

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid profile: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
