"""Route registration table.

Every endpoint the service exposes is listed here as (method, path, handler)
and registered explicitly on the application.
"""

from typing import Callable, NamedTuple, Tuple

from fastapi import FastAPI

from rejector.app.api.metrics import prometheus_metrics
from rejector.app.api.rejection import get_random_rejection, health

METRICS_PATH = "/metrics"


class Route(NamedTuple):
    method: str
    path: str
    endpoint: Callable
    name: str


def build_routes(api_prefix: str = "/api/v1") -> Tuple[Route, ...]:
    return (
        Route("GET", f"{api_prefix}/rejection", get_random_rejection, "get_random_rejection"),
        Route("GET", f"{api_prefix}/health", health, "health"),
        Route("GET", METRICS_PATH, prometheus_metrics, "prometheus_metrics"),
    )


def register_routes(app: FastAPI, routes: Tuple[Route, ...]) -> None:
    for route in routes:
        app.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            name=route.name,
        )
