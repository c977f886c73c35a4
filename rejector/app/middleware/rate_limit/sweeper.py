"""Periodic eviction of idle rate limit buckets."""

import asyncio
from typing import Optional, Sequence

from rejector.app.core.logging import get_logger
from rejector.app.middleware.rate_limit.limiter import TokenBucketRateLimiter

logger = get_logger(__name__)


class BucketSweeper:
    """Background task sweeping idle buckets on a fixed period.

    Usage:
        sweeper = BucketSweeper([limiter], interval=600)
        await sweeper.start()
        ...
        await sweeper.stop()
    """

    def __init__(
        self,
        limiters: Sequence[TokenBucketRateLimiter],
        interval: float = 600.0,
        shutdown_timeout: float = 5.0,
    ):
        """Initialize the sweeper.

        Args:
            limiters: Rate limiters whose buckets are swept
            interval: Seconds between sweeps
            shutdown_timeout: Seconds to wait for the task before cancelling it
        """
        self._limiters = list(limiters)
        self._interval = interval
        self._shutdown_timeout = shutdown_timeout
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            logger.debug("Bucket sweeper already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info(f"Started rate limit bucket sweeper (interval: {self._interval}s)")

    async def stop(self) -> None:
        """Signal the task, wait for it, then cancel it if it did not finish."""
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=self._shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning("Bucket sweeper did not stop gracefully, cancelling")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            self._stop_event = None
            logger.info("Stopped rate limit bucket sweeper")

    async def sweep_all(self) -> int:
        """Run one sweep over every limiter off the event loop."""
        removed = 0
        for limiter in self._limiters:
            removed += await asyncio.to_thread(limiter.sweep)
        return removed

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            else:
                break

            try:
                await self.sweep_all()
            except Exception as e:
                logger.error(f"Error during bucket cleanup: {e}", exc_info=True)
