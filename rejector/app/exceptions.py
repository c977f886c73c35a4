"""Custom exceptions for the rejection service."""

from typing import Any, Dict


class RejectionServiceError(Exception):
    """Base class for service exceptions with HTTP status code.

    Every subclass defines the status code and error label it maps to, so the
    API layer and the middleware translate errors the same way.
    """
    status_code: int = 500
    error: str = "Internal Server Error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to the JSON error body."""
        return {"error": self.error, "message": self.message}


class NotReadyError(RejectionServiceError):
    """Raised when the message store has not been initialized.

    Maps to HTTP 503 Service Unavailable.
    """
    status_code = 503
    error = "Service Unavailable"
    default_message = "Rejection service not ready - cache not initialized"


class InvalidStateError(RejectionServiceError):
    """Raised when the store hands out an empty message.

    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500
    error = "Internal Server Error"
    default_message = "Invalid rejection reason retrieved from cache"


class RateLimitedError(RejectionServiceError):
    """Raised when a client has no tokens left.

    Maps to HTTP 429 Too Many Requests.
    """
    status_code = 429
    error = "Rate limit exceeded"
    default_message = "Too many requests. Try again later."

    def __init__(self, retry_after: int | None = None, message: str | None = None):
        self.retry_after = retry_after
        super().__init__(message)


class MalformedRequestError(RejectionServiceError):
    """Raised for requests with a disallowed method or content length.

    Maps to HTTP 400 Bad Request.
    """
    status_code = 400
    error = "Bad Request"
    default_message = "Invalid request format"


class SuspiciousRequestError(RejectionServiceError):
    """Raised for requests matching bot heuristics.

    Maps to HTTP 403 Forbidden.
    """
    status_code = 403
    error = "Forbidden"
    default_message = "Suspicious activity detected"


class InternalFailureError(RejectionServiceError):
    """Raised when service statistics cannot be computed.

    Maps to HTTP 503 Service Unavailable.
    """
    status_code = 503
    error = "Service Unavailable"
    default_message = "Service statistics unavailable"


class StoreInitializationError(RuntimeError):
    """Raised when the message store cannot be loaded.

    Fatal: the application refuses to start.
    """
