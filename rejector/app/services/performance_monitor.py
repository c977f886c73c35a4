"""Periodic process memory and garbage collector logging."""

import asyncio
import gc
import resource
import sys
from typing import Any, Callable, Dict, Optional

from rejector.app.core.logging import get_logger

logger = get_logger(__name__)


def collect_memory_sample() -> Dict[str, Any]:
    """Sample peak RSS and garbage collector state for the current process."""
    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss is reported in bytes on macOS and kilobytes elsewhere
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return {
        "max_rss_mb": round(usage.ru_maxrss / divisor, 2),
        "gc_counts": gc.get_count(),
        "gc_objects": len(gc.get_objects()),
    }


class PerformanceMonitor:
    """Background task logging memory usage on a fixed interval."""

    def __init__(
        self,
        interval: float = 300.0,
        extra_stats: Optional[Callable[[], Dict[str, Any]]] = None,
        shutdown_timeout: float = 5.0,
    ):
        """Initialize the monitor.

        Args:
            interval: Seconds between samples
            extra_stats: Callable returning additional fields to log
            shutdown_timeout: Seconds to wait for the task before cancelling it
        """
        self._interval = interval
        self._extra_stats = extra_stats
        self._shutdown_timeout = shutdown_timeout
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            return

        logger.info("Starting performance monitoring...")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="performance-monitor")

    async def stop(self) -> None:
        if self._task is None:
            return

        logger.info("Stopping performance monitoring...")
        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=self._shutdown_timeout)
        except asyncio.TimeoutError:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            self._stop_event = None

    def log_memory_usage(self) -> None:
        try:
            sample = collect_memory_sample()
            if self._extra_stats is not None:
                sample.update(self._extra_stats())
        except Exception as e:
            logger.error(f"Failed to log memory usage: {e}", exc_info=True)
            return

        logger.info(
            f"Memory Usage - Peak RSS: {sample['max_rss_mb']}MB, "
            f"GC counts: {sample['gc_counts']}, tracked objects: {sample['gc_objects']}",
            extra=sample,
        )

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            self.log_memory_usage()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
