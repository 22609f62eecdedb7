"""Run deadline shared by the evaluator and the retry loop."""

import asyncio
import time


class Deadline:
    """Monotonic point in time after which the run gives up."""

    def __init__(self, seconds: float, clock=time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self.expires_at

    def budget(self, limit: float) -> float:
        """Seconds an operation may take: ``limit`` clipped to what is left."""
        return min(limit, self.remaining())

    async def sleep(self, interval: float) -> bool:
        """Wait ``interval`` seconds or until expiry, whichever comes first.

        Returns False when the wait was cut short by the deadline.
        """
        remaining = self.remaining()
        if interval >= remaining:
            await asyncio.sleep(remaining)
            return False
        await asyncio.sleep(interval)
        return True
