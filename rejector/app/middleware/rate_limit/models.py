"""Rate limiting data models.

This module contains dataclasses for rate limit state and results.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after: Optional[int] = None


@dataclass
class TokenBucket:
    """Token bucket state for a single client.

    All fields except ``lock`` are mutated only while holding ``lock``.
    ``last_access`` is also read by the idle sweep without the lock.
    """
    capacity: int
    tokens: float
    last_refill: float
    last_access: float
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
