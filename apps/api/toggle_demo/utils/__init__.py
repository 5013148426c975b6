"""Utility functions."""

from toggle_demo.utils.context import (
    CORRELATION_ID_HEADER,
    CorrelationContext,
    CorrelationIdMiddleware,
    get_correlation_context,
    get_correlation_id,
)

from toggle_demo.utils.timezone import (
    UTC,
    utc_now,
    to_utc,
    to_iso8601,
)

__all__ = [
    # Context
    "CORRELATION_ID_HEADER",
    "CorrelationContext",
    "CorrelationIdMiddleware",
    "get_correlation_context",
    "get_correlation_id",
    # Timezone
    "UTC",
    "utc_now",
    "to_utc",
    "to_iso8601",
]
