"""Request-scoped context propagated through context variables.

The request id is bound by the request id middleware and read by the
logging filter and the rejection service, including from handlers running
on the thread pool.
"""

import secrets
from contextvars import ContextVar, Token
from typing import Optional

REQUEST_ID_LENGTH = 8

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """Generate a short request-tracking token (8 random hex characters)."""
    return secrets.token_hex(REQUEST_ID_LENGTH // 2)


def get_current_request_id() -> Optional[str]:
    """Get the request id bound to the current context, if any."""
    return _request_id_var.get()


def set_current_request_id(request_id: Optional[str]) -> Token:
    """Bind a request id to the current context.

    Returns:
        Token that can be passed to reset_current_request_id
    """
    return _request_id_var.set(request_id)


def reset_current_request_id(token: Token) -> None:
    _request_id_var.reset(token)
