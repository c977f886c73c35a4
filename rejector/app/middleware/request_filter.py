"""Request validation and bot filtering middleware.

Rejects malformed requests (400) and requests that look automated (403)
before they reach rate limiting, so rejected traffic never consumes tokens.
"""

from typing import Iterable, Mapping, Optional, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rejector.app.core.config import DEFAULT_SUSPICIOUS_PATTERNS
from rejector.app.core.logging import get_log_context, get_logger, sanitize_for_logging
from rejector.app.exceptions import (
    MalformedRequestError,
    RejectionServiceError,
    SuspiciousRequestError,
)
from rejector.app.middleware.client_ip import extract_client_key

logger = get_logger(__name__)

ALLOWED_METHODS = ("GET",)
DEFAULT_MAX_CONTENT_LENGTH = 1024


def is_valid_request(
    method: str,
    headers: Mapping[str, str],
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    allowed_methods: Sequence[str] = ALLOWED_METHODS,
) -> bool:
    """Check the method and the declared body size."""
    if method.upper() not in allowed_methods:
        return False

    content_length = headers.get("Content-Length")
    if content_length is not None:
        try:
            length = int(content_length)
        except ValueError:
            return False
        if length < 0 or length > max_content_length:
            return False

    return True


def is_suspicious_request(
    headers: Mapping[str, str],
    patterns: Iterable[str] = DEFAULT_SUSPICIOUS_PATTERNS,
) -> bool:
    """Flag requests without a user agent or with a known bot user agent.

    Errors while inspecting the headers classify the request as suspicious.
    """
    try:
        user_agent = headers.get("User-Agent")
        if user_agent is None or not user_agent.strip():
            return True

        user_agent = user_agent.lower()
        return any(pattern in user_agent for pattern in patterns)
    except Exception as e:
        logger.warning(f"Error checking suspicious request: {e}")
        return True


class RequestFilterMiddleware(BaseHTTPMiddleware):
    """Middleware returning 400 for malformed and 403 for suspicious requests."""

    def __init__(
        self,
        app,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
        suspicious_patterns: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.max_content_length = max_content_length
        self.suspicious_patterns = [
            p.lower() for p in (
                suspicious_patterns
                if suspicious_patterns is not None
                else DEFAULT_SUSPICIOUS_PATTERNS
            )
        ]

    def check(self, request: Request) -> None:
        """Raise the error the request should be rejected with, if any."""
        if not is_valid_request(request.method, request.headers, self.max_content_length):
            raise MalformedRequestError()
        if is_suspicious_request(request.headers, self.suspicious_patterns):
            raise SuspiciousRequestError()

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            self.check(request)
        except RejectionServiceError as exc:
            client_ip = extract_client_key(
                request.headers, request.client.host if request.client else None
            )
            logger.warning(
                f"{exc.error} request blocked from IP: {client_ip}",
                extra=get_log_context(
                    client_ip=client_ip,
                    method=request.method,
                    path=request.url.path,
                    user_agent=sanitize_for_logging(request.headers.get("User-Agent")),
                ),
            )
            return JSONResponse(status_code=exc.status_code, content=exc.to_response())

        return await call_next(request)
