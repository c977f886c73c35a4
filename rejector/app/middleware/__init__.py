"""Middleware package for the rejection service."""

from rejector.app.middleware.client_ip import extract_client_key
from rejector.app.middleware.rate_limit import RateLimitMiddleware
from rejector.app.middleware.request_filter import RequestFilterMiddleware
from rejector.app.middleware.request_id import RequestIdMiddleware, get_request_id
from rejector.app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "extract_client_key",
    "RateLimitMiddleware",
    "RequestFilterMiddleware",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "get_request_id",
]
