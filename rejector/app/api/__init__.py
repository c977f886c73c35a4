"""API endpoints package for the rejection service."""

from rejector.app.api.routes import Route, build_routes, register_routes

__all__ = [
    "Route",
    "build_routes",
    "register_routes",
]
