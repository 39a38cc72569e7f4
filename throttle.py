"""
Randomized sleep before fetching pages after the seed.

Spreading requests over a random interval avoids a fixed, easily detectable
request cadence and keeps repeated crawls of the same site out of step.
"""

import logging
import math
import random
from typing import Optional

import capture_config

logger = logging.getLogger(__name__)


def compute_delay_ms(rng: Optional[random.Random] = None,
                     base_seconds: float = capture_config.SLEEP_BASE_SECONDS) -> int:
    """
    Draw a delay from [base / 2, base * 1.5) seconds, in milliseconds.

    Args:
        rng: Random source (module-level random if None)
        base_seconds: Base sleep time in seconds

    Returns:
        Delay in whole milliseconds
    """
    r = (rng or random).random()
    return math.floor(1000 * (base_seconds / 2 + r * base_seconds))


class Throttle:
    """Applies the random delay through the frontier's sleep primitive."""

    def __init__(self, frontier, base_seconds: float = capture_config.SLEEP_BASE_SECONDS,
                 rng: Optional[random.Random] = None):
        self.frontier = frontier
        self.base_seconds = base_seconds
        self.rng = rng or random.Random()

    async def wait(self, url: str, is_seed: bool) -> int:
        """
        Sleep before capturing url unless it is the seed.

        Returns:
            The delay applied in milliseconds (0 for the seed)
        """
        if is_seed:
            return 0

        delay = compute_delay_ms(self.rng, self.base_seconds)
        logger.info(f"Random sleep for {delay} ms, before capturing {url}")
        await self.frontier.sleep(delay)
        return delay
