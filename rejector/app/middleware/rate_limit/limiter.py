"""In-memory per-client token bucket rate limiter.

Buckets are created lazily on the first request from a client and removed
only by the idle sweep. Each bucket carries its own lock, so admission checks
for different clients never contend; the map lock is held only while a
bucket is created or removed.
"""

import math
import threading
import time
from typing import Callable, Dict, Literal, Optional

from rejector.app.core.logging import get_logger
from rejector.app.middleware.rate_limit.models import RateLimitResult, TokenBucket

logger = get_logger(__name__)

RefillStrategy = Literal["interval", "greedy"]


class TokenBucketRateLimiter:
    """Token bucket rate limiter keyed by client IP.

    Refill strategies:
    - ``interval``: the full capacity is added once per elapsed window
    - ``greedy``: tokens trickle in continuously at capacity / window

    In both cases the bucket never holds more than ``capacity`` tokens.
    """

    def __init__(
        self,
        capacity: int = 100,
        window_seconds: float = 60,
        idle_timeout_seconds: float = 3600,
        refill_strategy: RefillStrategy = "interval",
        clock: Callable[[], float] = time.monotonic,
        name: str = "default",
    ):
        """Initialize rate limiter.

        Args:
            capacity: Maximum tokens per bucket (requests per window)
            window_seconds: Refill window in seconds
            idle_timeout_seconds: Buckets unused for longer are swept
            refill_strategy: ``interval`` or ``greedy``
            clock: Monotonic clock, injectable for tests
            name: Pool name used in logs and metrics
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if refill_strategy not in ("interval", "greedy"):
            raise ValueError(f"Unknown refill strategy: {refill_strategy}")

        self.capacity = capacity
        self.window_seconds = window_seconds
        self.idle_timeout_seconds = idle_timeout_seconds
        self.refill_strategy = refill_strategy
        self.name = name
        self._clock = clock
        self._rate = capacity / window_seconds

        self._buckets: Dict[str, TokenBucket] = {}
        self._buckets_lock = threading.Lock()

        self._stats_lock = threading.Lock()
        self._denied = 0

    def admit(self, key: str, tokens: int = 1) -> RateLimitResult:
        """Try to consume tokens from the bucket of ``key``.

        Fails closed: if the bucket cannot be created the request is denied.
        """
        try:
            bucket = self._get_or_create_bucket(key)
        except Exception as e:
            logger.error(f"Failed to create rate limit bucket for {key}: {e}", exc_info=True)
            self._count_denied()
            return RateLimitResult(
                allowed=False,
                limit=self.capacity,
                remaining=0,
                reset_time=int(time.time() + self.window_seconds),
                retry_after=math.ceil(self.window_seconds),
            )

        with bucket.lock:
            now = self._clock()
            self._refill(bucket, now)
            bucket.last_access = now

            if bucket.tokens >= tokens:
                bucket.tokens -= tokens
                return RateLimitResult(
                    allowed=True,
                    limit=self.capacity,
                    remaining=int(bucket.tokens),
                    reset_time=int(time.time() + self._seconds_until_refill(bucket, now)),
                )

            retry_after = max(1, math.ceil(self._seconds_until_refill(bucket, now)))

        self._count_denied()
        return RateLimitResult(
            allowed=False,
            limit=self.capacity,
            remaining=0,
            reset_time=int(time.time() + retry_after),
            retry_after=retry_after,
        )

    def sweep(self, now: Optional[float] = None) -> int:
        """Remove buckets idle for longer than the idle timeout.

        An admission racing the sweep on the same key either still holds the
        removed bucket (one grace check) or recreates a fresh one.

        Args:
            now: Reference time on the limiter's clock (defaults to the clock)

        Returns:
            Number of buckets removed
        """
        if now is None:
            now = self._clock()
        cutoff = now - self.idle_timeout_seconds

        # Scan a snapshot so admissions for new keys never wait on the scan
        candidates = [
            (key, bucket) for key, bucket in list(self._buckets.items())
            if bucket.last_access < cutoff
        ]

        removed = 0
        for key, bucket in candidates:
            with self._buckets_lock:
                if self._buckets.get(key) is bucket and bucket.last_access < cutoff:
                    del self._buckets[key]
                    removed += 1

        if removed:
            logger.debug(f"Cleaned up {removed} old rate limit buckets ({self.name})")
        return removed

    def bucket_count(self) -> int:
        return len(self._buckets)

    def denied_count(self) -> int:
        with self._stats_lock:
            return self._denied

    def get_bucket(self, key: str) -> Optional[TokenBucket]:
        return self._buckets.get(key)

    def _get_or_create_bucket(self, key: str) -> TokenBucket:
        bucket = self._buckets.get(key)
        if bucket is not None:
            return bucket

        with self._buckets_lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                now = self._clock()
                bucket = TokenBucket(
                    capacity=self.capacity,
                    tokens=float(self.capacity),
                    last_refill=now,
                    last_access=now,
                )
                self._buckets[key] = bucket
                logger.debug(f"Creating new rate limit bucket for IP: {key} ({self.name})")
        return bucket

    def _refill(self, bucket: TokenBucket, now: float) -> None:
        elapsed = now - bucket.last_refill
        if elapsed <= 0:
            return

        if self.refill_strategy == "greedy":
            bucket.tokens = min(self.capacity, bucket.tokens + elapsed * self._rate)
            bucket.last_refill = now
            return

        windows = int(elapsed // self.window_seconds)
        if windows:
            bucket.tokens = min(self.capacity, bucket.tokens + windows * self.capacity)
            bucket.last_refill += windows * self.window_seconds

    def _seconds_until_refill(self, bucket: TokenBucket, now: float) -> float:
        if self.refill_strategy == "greedy":
            missing = max(0.0, 1 - bucket.tokens)
            return missing / self._rate
        return max(0.0, bucket.last_refill + self.window_seconds - now)

    def _count_denied(self) -> None:
        with self._stats_lock:
            self._denied += 1
