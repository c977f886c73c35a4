"""Rejection as a Service."""

__version__ = "1.0.0"
