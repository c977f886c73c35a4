"""Rate limiting middleware for the rejection service.

This module provides per-client-IP token bucket rate limiting with periodic
eviction of idle buckets.
"""

from typing import Mapping, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rejector.app.core.logging import get_log_context, get_logger
from rejector.app.exceptions import RateLimitedError
from rejector.app.middleware.client_ip import extract_client_key
from rejector.app.middleware.rate_limit.limiter import TokenBucketRateLimiter
from rejector.app.middleware.rate_limit.models import RateLimitResult, TokenBucket
from rejector.app.middleware.rate_limit.sweeper import BucketSweeper

logger = get_logger(__name__)

__all__ = [
    "RateLimitResult",
    "TokenBucket",
    "TokenBucketRateLimiter",
    "BucketSweeper",
    "RateLimitMiddleware",
]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce per-IP rate limits on requests.

    Requests are checked against ``limiter`` unless their path has an entry in
    ``route_limiters``: a limiter there selects a separate bucket pool, None
    exempts the path.
    """

    def __init__(
        self,
        app,
        limiter: TokenBucketRateLimiter,
        route_limiters: Optional[Mapping[str, Optional[TokenBucketRateLimiter]]] = None,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.route_limiters = dict(route_limiters or {})

    def _select_limiter(self, path: str) -> Optional[TokenBucketRateLimiter]:
        if path in self.route_limiters:
            return self.route_limiters[path]
        return self.limiter

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        limiter = self._select_limiter(request.url.path)
        if limiter is None:
            return await call_next(request)

        client_ip = extract_client_key(
            request.headers, request.client.host if request.client else None
        )
        request.state.client_ip = client_ip
        result = limiter.admit(client_ip)

        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for IP: {client_ip}",
                extra=get_log_context(client_ip=client_ip, path=request.url.path),
            )
            exc = RateLimitedError(retry_after=result.retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response(),
                headers={
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(result.reset_time),
                    "Retry-After": str(result.retry_after or 60),
                },
            )

        logger.debug(f"Request allowed for IP: {client_ip}")
        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(result.reset_time)

        return response
