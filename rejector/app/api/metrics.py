"""Prometheus-compatible metrics endpoint.

Exposes the request counters, store state and rate limiter state of the
running service in the Prometheus text exposition format.
"""

import time

from fastapi.responses import PlainTextResponse

from rejector.app.api.dependencies import RuntimeDep
from rejector.app.runtime import RejectionRuntime

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_start_time = time.time()


def render_prometheus_metrics(runtime: RejectionRuntime) -> str:
    """Render the runtime state as Prometheus text.

    Returns:
        Prometheus-formatted metrics string
    """
    snapshot = runtime.counter.snapshot()
    lines = []

    lines.append("# HELP rejection_requests_total Total number of rejection requests")
    lines.append("# TYPE rejection_requests_total counter")
    lines.append(f"rejection_requests_total {snapshot.total}")

    lines.append("\n# HELP rejection_requests_success_total Successful rejection requests")
    lines.append("# TYPE rejection_requests_success_total counter")
    lines.append(f"rejection_requests_success_total {snapshot.success}")

    lines.append("\n# HELP rejection_requests_error_total Failed rejection requests")
    lines.append("# TYPE rejection_requests_error_total counter")
    lines.append(f"rejection_requests_error_total {snapshot.errors}")

    lines.append("\n# HELP rejection_store_ready Message store state (1=ready, 0=not ready)")
    lines.append("# TYPE rejection_store_ready gauge")
    lines.append(f"rejection_store_ready {1 if runtime.store.is_ready() else 0}")

    lines.append("\n# HELP rejection_ratelimit_buckets Live rate limit buckets per pool")
    lines.append("# TYPE rejection_ratelimit_buckets gauge")
    for limiter in runtime.limiters:
        lines.append(f'rejection_ratelimit_buckets{{pool="{limiter.name}"}} {limiter.bucket_count()}')

    lines.append("\n# HELP rejection_ratelimit_denied_total Requests denied by the rate limiter")
    lines.append("# TYPE rejection_ratelimit_denied_total counter")
    for limiter in runtime.limiters:
        lines.append(f'rejection_ratelimit_denied_total{{pool="{limiter.name}"}} {limiter.denied_count()}')

    lines.append("\n# HELP rejection_uptime_seconds Process uptime in seconds")
    lines.append("# TYPE rejection_uptime_seconds gauge")
    lines.append(f"rejection_uptime_seconds {round(time.time() - _start_time, 2)}")

    return "\n".join(lines) + "\n"


def prometheus_metrics(runtime: RuntimeDep) -> PlainTextResponse:
    """Prometheus-compatible metrics endpoint."""
    return PlainTextResponse(
        content=render_prometheus_metrics(runtime),
        media_type=PROMETHEUS_CONTENT_TYPE,
    )
