"""Middleware package."""

from toggle_demo.api.middleware.logging import LoggingMiddleware
from toggle_demo.utils.context import CorrelationIdMiddleware, get_correlation_id

__all__ = [
    "CorrelationIdMiddleware",
    "LoggingMiddleware",
    "get_correlation_id",
]
