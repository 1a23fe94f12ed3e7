"""Rate limiter for outbound Slack Web API writes."""

import asyncio
import time

from aiolimiter import AsyncLimiter
from loguru import logger


class SlackRateLimiter:
    """
    Throttles outbound writes (proactive) with aiolimiter and pauses all
    writes after Slack answers 429 (reactive).

    A rate-limited call is not retried; only later calls wait.
    """

    def __init__(self, rate_limit: int = 1, rate_window: float = 1.0):
        self.limiter = AsyncLimiter(rate_limit, rate_window)
        self._blocked_until: float = 0

        logger.info(
            f"SlackRateLimiter initialized ({rate_limit} req / {rate_window}s)"
        )

    async def wait_if_blocked(self) -> bool:
        """
        Wait if currently rate limited or throttle to meet quota.

        Returns:
            True if was reactively blocked and waited, False otherwise.
        """
        waited_reactively = False
        if self.is_blocked():
            wait_time = self.remaining_wait()
            logger.warning(
                f"Slack rate limit active (reactive), waiting {wait_time:.1f}s..."
            )
            await asyncio.sleep(wait_time)
            waited_reactively = True

        async with self.limiter:
            return waited_reactively

    def set_blocked(self, seconds: float = 60) -> None:
        """Block all writes for the given number of seconds (reactive)."""
        self._blocked_until = time.time() + seconds
        logger.warning(f"Slack rate limit set for {seconds:.1f}s (reactive)")

    def is_blocked(self) -> bool:
        return time.time() < self._blocked_until

    def remaining_wait(self) -> float:
        return max(0, self._blocked_until - time.time())
