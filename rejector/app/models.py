"""Response and statistics models for the rejection service."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from rejector.app.core.request_context import generate_request_id


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class RejectionRecord(BaseModel):
    """A single rejection handed out by the API.

    Serialized as ``{id, reason, timestamp, requestId}``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., ge=0, description="Sequential request number")
    reason: str = Field(..., description="The rejection message")
    timestamp: datetime = Field(default_factory=_utc_now)
    request_id: str = Field(
        default_factory=generate_request_id,
        alias="requestId",
        min_length=1,
    )

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason cannot be null or empty")
        return v

    @field_serializer("timestamp")
    def serialize_timestamp(self, ts: datetime) -> str:
        return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class ServiceStats:
    """Point-in-time service statistics reported by the health endpoint."""
    total_requests: int
    successful_requests: int
    error_requests: int
    success_rate: float
    cache_size: int
    cache_initialized: bool
    degraded: bool = False

    @classmethod
    def baseline(cls) -> "ServiceStats":
        """Snapshot reported when the real one cannot be computed."""
        return cls(
            total_requests=0,
            successful_requests=0,
            error_requests=0,
            success_rate=0.0,
            cache_size=0,
            cache_initialized=False,
            degraded=True,
        )

    def to_response(self) -> Dict[str, Any]:
        return {
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "errorRequests": self.error_requests,
            "successRate": self.success_rate,
            "cacheSize": self.cache_size,
            "cacheInitialized": self.cache_initialized,
        }
