"""Client identity extraction for rate limiting and logging."""

from typing import Mapping, Optional

from rejector.app.core.logging import get_logger

logger = get_logger(__name__)

FORWARDED_FOR_HEADER = "X-Forwarded-For"
REAL_IP_HEADER = "X-Real-IP"
UNKNOWN_CLIENT = "0.0.0.0"


def _usable(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == "unknown":
        return None
    return value


def extract_client_key(
    headers: Mapping[str, str],
    remote_address: Optional[str] = None,
) -> str:
    """Get the client IP used as the rate limit key.

    Checks X-Forwarded-For (first hop), then X-Real-IP, then the socket
    address. Never raises: a missing identity only weakens the precision of
    rate limiting, it must not prevent the request from being evaluated.

    Args:
        headers: Request headers (case-insensitive mapping)
        remote_address: Peer address of the connection, if known

    Returns:
        Client IP string, or "0.0.0.0" if no source is usable
    """
    try:
        forwarded = _usable(headers.get(FORWARDED_FOR_HEADER))
        if forwarded:
            first_hop = _usable(forwarded.split(",")[0])
            if first_hop:
                return first_hop

        real_ip = _usable(headers.get(REAL_IP_HEADER))
        if real_ip:
            return real_ip

        if remote_address and remote_address.strip():
            return remote_address.strip()
    except Exception as e:
        logger.warning(f"Error extracting client IP address: {e}")

    return UNKNOWN_CLIENT
