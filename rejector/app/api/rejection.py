"""Rejection and health endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from rejector.app.api.dependencies import RejectionServiceDep
from rejector.app.core.logging import get_log_context, get_logger, sanitize_for_logging
from rejector.app.exceptions import InternalFailureError, RejectionServiceError
from rejector.app.middleware.client_ip import extract_client_key

logger = get_logger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "X-Content-Type-Options": "nosniff",
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def get_random_rejection(request: Request, service: RejectionServiceDep) -> JSONResponse:
    """Return a random rejection reason with tracking metadata.

    Runs on the thread pool; the service and its counters are thread-safe.
    """
    client_ip = getattr(request.state, "client_ip", None) or extract_client_key(
        request.headers, request.client.host if request.client else None
    )
    user_agent = sanitize_for_logging(request.headers.get("User-Agent"))
    logger.info(
        f"Processing rejection request from IP: {client_ip}, User-Agent: {user_agent}",
        extra=get_log_context(client_ip=client_ip),
    )

    try:
        record = service.get_random_rejection(
            request_id=getattr(request.state, "request_id", None)
        )
    except RejectionServiceError as e:
        logger.error(f"Rejection request failed for client {client_ip}: {e.message}")
        raise

    logger.info(
        f"Successfully generated rejection response {record.request_id} for client {client_ip}"
    )
    return JSONResponse(
        content=record.to_response(),
        headers={"X-Request-ID": record.request_id, **NO_STORE_HEADERS},
    )


def health(service: RejectionServiceDep) -> JSONResponse:
    """Health check endpoint with service statistics."""
    logger.debug("Health check requested")
    headers = {"Cache-Control": "no-cache"}

    try:
        stats = service.get_service_statistics()
        if stats.degraded:
            raise InternalFailureError()

        body: Dict[str, Any] = {
            "status": "UP",
            "timestamp": _timestamp(),
            "statistics": stats.to_response(),
        }
        if service.is_service_healthy(stats):
            return JSONResponse(content=body, headers=headers)

        body["status"] = "DOWN"
        body["error"] = (
            "Rejection cache not initialized"
            if not stats.cache_initialized
            else "Success rate below healthy threshold"
        )
        return JSONResponse(status_code=503, content=body, headers=headers)
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={"status": "DOWN", "timestamp": _timestamp(), "error": str(e)},
            headers=headers,
        )
