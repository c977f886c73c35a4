"""Request ID middleware for request tracking.

This middleware assigns a short tracking token to each incoming request,
making it available to handlers and log records and returning it to the
client in the X-Request-ID header.
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rejector.app.core.request_context import (
    generate_request_id,
    reset_current_request_id,
    set_current_request_id,
)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add a request ID to all requests.

    The request ID is:
    1. Generated as 8 random hex characters (client-supplied ids are ignored
       because the id is also the rejection's tracking token)
    2. Added to request.state and the current context for logging
    3. Returned in the X-Request-ID response header
    """

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = generate_request_id()
        request.state.request_id = request_id
        token = set_current_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_current_request_id(token)

        response.headers[self.header_name] = request_id
        return response


def get_request_id(request: Request) -> str:
    """Get request ID from request state.

    Args:
        request: FastAPI request object

    Returns:
        Request ID string
    """
    return getattr(request.state, "request_id", "unknown")
