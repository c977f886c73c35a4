import json
import re
from typing import Annotated, Any, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_SUSPICIOUS_PATTERNS = [
    "bot",
    "crawler",
    "spider",
    "scraper",
    "curl",
    "wget",
    "python",
    "java",
]


def _parse_list(raw: Any) -> list[str]:
    """Parse a list setting given as JSON or as a comma/space separated string."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []

    # Prefer JSON, but tolerate plain values so a misconfigured deployment
    # does not crash at startup.
    if raw.startswith(("[", '"')):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]
        if isinstance(parsed, str):
            raw = parsed.strip()

    return [p for p in re.split(r"[,\s]+", raw) if p]


def _parse_cors_origins(raw: Any) -> list[str]:
    parts = _parse_list(raw)
    origins: list[str] = []
    for part in parts:
        if part == "*":
            return ["*"]
        if "://" in part:
            origins.append(part)
            continue
        # Browsers include the scheme in the Origin header, so a bare host
        # is expanded to both schemes.
        origins.append(f"http://{part}")
        origins.append(f"https://{part}")

    seen: set[str] = set()
    result: list[str] = []
    for origin in origins:
        if origin in seen:
            continue
        seen.add(origin)
        result.append(origin)
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = "/api/v1"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json
    log_queue_size: int = 10000

    # Rate limiting settings
    rate_limit_capacity: int = 100
    rate_limit_window_seconds: int = 60
    rate_limit_refill_strategy: Literal["interval", "greedy"] = "interval"
    rate_limit_idle_timeout_seconds: int = 3600  # Evict buckets idle for 1 hour
    rate_limit_sweep_interval_seconds: int = 600  # Sweep every 10 minutes
    health_rate_limit_mode: Literal["separate", "shared", "bypass"] = "separate"

    # Request filtering
    max_content_length: int = 1024  # Max declared request size (1KB)
    suspicious_user_agent_patterns: Annotated[list[str], NoDecode] = list(
        DEFAULT_SUSPICIOUS_PATTERNS
    )

    # CORS settings
    cors_origins: Annotated[list[str], NoDecode] = ["*"]
    cors_max_age: int = 3600

    # Monitoring
    metrics_log_interval: int = 100  # Log aggregate metrics every N requests
    performance_monitor_interval_seconds: int = 300  # 0 disables the monitor
    shutdown_timeout_seconds: float = 5.0

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("suspicious_user_agent_patterns", mode="before")
    @classmethod
    def decode_patterns(cls, v: Any) -> list[str]:
        return [p.lower() for p in _parse_list(v)]

    @field_validator(
        "rate_limit_capacity",
        "rate_limit_window_seconds",
        "rate_limit_sweep_interval_seconds",
        "metrics_log_interval",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate counts and intervals are positive."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("max_content_length", "performance_monitor_interval_seconds")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @field_validator("shutdown_timeout_seconds")
    @classmethod
    def validate_shutdown_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("shutdown_timeout_seconds must be positive")
        return v

    @model_validator(mode="after")
    def validate_idle_timeout(self) -> "Settings":
        """An idle bucket must outlive at least one refill window."""
        if self.rate_limit_idle_timeout_seconds < self.rate_limit_window_seconds:
            raise ValueError(
                "rate_limit_idle_timeout_seconds must not be shorter than "
                "rate_limit_window_seconds"
            )
        return self

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
