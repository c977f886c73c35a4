"""Request-scoped access to the application runtime."""

from typing import Annotated

from fastapi import Depends, Request

from rejector.app.runtime import RejectionRuntime
from rejector.app.services.rejection_service import RejectionService


def get_runtime(request: Request) -> RejectionRuntime:
    """Get the runtime attached to the application by create_app."""
    return request.app.state.runtime


def get_rejection_service(request: Request) -> RejectionService:
    return get_runtime(request).service


RuntimeDep = Annotated[RejectionRuntime, Depends(get_runtime)]
RejectionServiceDep = Annotated[RejectionService, Depends(get_rejection_service)]
