"""
Admission control for background fulfillment work
"""
import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class AdmissionGate:
    """
    Bounds background work in two ways:
    - at most `max_concurrent` holders inside `async with gate`
    - at most `max_pending` admitted requests (running + waiting); beyond
      that `try_admit` refuses instead of queueing
    """

    def __init__(self, max_concurrent: int, max_pending: Optional[int] = None):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self.max_concurrent = max_concurrent
        self.max_pending = max(max_pending or max_concurrent, max_concurrent)
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._pending = 0
        self._running = 0
        self.rejected = 0

    def try_admit(self) -> bool:
        """Reserve a pending slot. Must be paired with `release()`."""
        if self._pending >= self.max_pending:
            self.rejected += 1
            logger.warning("Admission refused: %d requests pending (max %d)", self._pending, self.max_pending)
            return False
        self._pending += 1
        return True

    def release(self) -> None:
        if self._pending <= 0:
            raise RuntimeError("release() called without a matching try_admit()")
        self._pending -= 1

    async def __aenter__(self) -> "AdmissionGate":
        await self._semaphore.acquire()
        self._running += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._running -= 1
        self._semaphore.release()

    def get_stats(self) -> dict:
        """Get current gate statistics"""
        return {
            'pending': self._pending,
            'running': self._running,
            'max_concurrent': self.max_concurrent,
            'max_pending': self.max_pending,
            'rejected': self.rejected,
        }
