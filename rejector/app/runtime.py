"""Explicit lifecycle for the stateful parts of the service.

The runtime builds every component from settings, starts the background
tasks and loads the message store in ``open()``, and stops the tasks in
``close()``. The FastAPI lifespan enters it with ``async with``.
"""

from typing import Optional

from rejector.app.core.config import Settings, settings as default_settings
from rejector.app.core.logging import get_logger
from rejector.app.middleware.rate_limit import BucketSweeper, TokenBucketRateLimiter
from rejector.app.services.message_store import MessageStore
from rejector.app.services.performance_monitor import PerformanceMonitor
from rejector.app.services.rejection_service import RejectionService
from rejector.app.services.request_counter import RequestCounter

logger = get_logger(__name__)


class RejectionRuntime:
    """Owns the store, counters, rate limiters and background tasks.

    Usage:
        runtime = RejectionRuntime(settings)
        async with runtime:
            ...
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[MessageStore] = None,
        counter: Optional[RequestCounter] = None,
        limiter: Optional[TokenBucketRateLimiter] = None,
    ):
        self.settings = settings or default_settings
        self.store = store or MessageStore()
        self.counter = counter or RequestCounter()
        self.limiter = limiter or self._build_limiter("fetch")

        mode = self.settings.health_rate_limit_mode
        if mode == "separate":
            self.health_limiter: Optional[TokenBucketRateLimiter] = self._build_limiter("health")
        elif mode == "shared":
            self.health_limiter = self.limiter
        else:
            self.health_limiter = None

        self.service = RejectionService(
            self.store,
            self.counter,
            metrics_log_interval=self.settings.metrics_log_interval,
        )
        self.sweeper = BucketSweeper(
            self.limiters,
            interval=self.settings.rate_limit_sweep_interval_seconds,
            shutdown_timeout=self.settings.shutdown_timeout_seconds,
        )
        self.monitor: Optional[PerformanceMonitor] = None
        if self.settings.performance_monitor_interval_seconds > 0:
            self.monitor = PerformanceMonitor(
                interval=self.settings.performance_monitor_interval_seconds,
                extra_stats=self._rate_limit_stats,
                shutdown_timeout=self.settings.shutdown_timeout_seconds,
            )
        self._opened = False

    @property
    def limiters(self) -> list[TokenBucketRateLimiter]:
        """Distinct rate limiters owned by this runtime."""
        limiters = [self.limiter]
        if self.health_limiter is not None and self.health_limiter is not self.limiter:
            limiters.append(self.health_limiter)
        return limiters

    async def open(self) -> None:
        """Start background tasks and load the message store.

        If any step fails, everything already started is stopped before the
        error propagates.
        """
        if self._opened:
            return

        try:
            await self.sweeper.start()
            self.store.initialize()
            if self.monitor is not None:
                await self.monitor.start()
        except BaseException:
            logger.error("Rejection service startup failed, stopping background tasks")
            await self.close()
            raise

        self._opened = True
        logger.info(
            "Rejection service runtime opened",
            extra={
                "cache_size": self.store.size(),
                "health_rate_limit_mode": self.settings.health_rate_limit_mode,
            },
        )

    async def close(self) -> None:
        """Stop background tasks. Safe to call more than once."""
        if self.monitor is not None:
            await self.monitor.stop()
        await self.sweeper.stop()
        self._opened = False

    async def __aenter__(self) -> "RejectionRuntime":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _build_limiter(self, name: str) -> TokenBucketRateLimiter:
        return TokenBucketRateLimiter(
            capacity=self.settings.rate_limit_capacity,
            window_seconds=self.settings.rate_limit_window_seconds,
            idle_timeout_seconds=self.settings.rate_limit_idle_timeout_seconds,
            refill_strategy=self.settings.rate_limit_refill_strategy,
            name=name,
        )

    def _rate_limit_stats(self) -> dict:
        return {
            f"ratelimit_buckets_{limiter.name}": limiter.bucket_count()
            for limiter in self.limiters
        }
