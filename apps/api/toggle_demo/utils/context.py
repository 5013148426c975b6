"""
Request Context Utilities.

Provides correlation IDs and request context for:
- Log correlation (bound into structlog's contextvars)
- Response metadata
- Debugging in production

Usage:
    # In app factory
    app.add_middleware(CorrelationIdMiddleware)

    # Access anywhere in request lifecycle
    from toggle_demo.utils.context import get_correlation_id

    correlation_id = get_correlation_id()
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from structlog.contextvars import bind_contextvars, clear_contextvars

from toggle_demo.core.config import settings
from toggle_demo.utils.timezone import utc_now

CORRELATION_ID_HEADER = "X-Correlation-ID"
USER_ID_HEADER = "X-User-ID"
SESSION_ID_HEADER = "X-Session-ID"

logger = structlog.get_logger()


# ============================================================
# CONTEXT VARIABLES
# ============================================================

# Request-scoped context using contextvars (async-safe)
_correlation_context: ContextVar[Optional["CorrelationContext"]] = ContextVar(
    "correlation_context", default=None
)


# ============================================================
# CORRELATION CONTEXT
# ============================================================

@dataclass(frozen=True)
class CorrelationContext:
    """
    Context for the current request.

    Everything here is attached to the ambient log context while the
    request is in flight.
    """
    correlation_id: str
    request_uri: str = ""
    request_method: str = ""

    # From optional headers
    user_id: Optional[str] = None
    session_id: Optional[str] = None

    started_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_request(cls, request: Request) -> CorrelationContext:
        return cls(
            correlation_id=resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER)),
            request_uri=request.url.path,
            request_method=request.method,
            user_id=request.headers.get(USER_ID_HEADER) or None,
            session_id=request.headers.get(SESSION_ID_HEADER) or None,
        )

    def to_log_context(self) -> dict[str, Any]:
        """Fields to bind into the ambient log context."""
        fields = {
            "correlation_id": self.correlation_id,
            "request_uri": self.request_uri,
            "request_method": self.request_method,
        }
        if self.user_id:
            fields["user_id"] = self.user_id
        if self.session_id:
            fields["session_id"] = self.session_id
        return fields


def resolve_correlation_id(header_value: Optional[str]) -> str:
    """Use the inbound header if it has content, otherwise mint a new ID."""
    if header_value and header_value.strip():
        return header_value.strip()
    return str(uuid.uuid4())


# ============================================================
# CONTEXT ACCESSORS
# ============================================================

def get_correlation_context() -> Optional[CorrelationContext]:
    """
    Get the full request context.

    Returns None if called outside of a request.
    """
    return _correlation_context.get()


def get_correlation_id() -> Optional[str]:
    """
    Get the current correlation ID.

    Returns None if called outside of a request.

    Usage:
        correlation_id = get_correlation_id()
        headers = {"X-Correlation-ID": correlation_id}
    """
    ctx = _correlation_context.get()
    return ctx.correlation_id if ctx else None


# ============================================================
# MIDDLEWARE
# ============================================================

class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation context to each request.

    Sets up:
    - correlation_id: From X-Correlation-ID header or generated
    - request_uri / request_method
    - user_id / session_id: From X-User-ID / X-Session-ID when present

    Unhandled errors become a JSON 500 that still carries the header.
    All of it is cleared again when the request finishes, however it
    finishes. Add it last so it wraps every other middleware.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        ctx = CorrelationContext.from_request(request)

        token = _correlation_context.set(ctx)
        clear_contextvars()
        bind_contextvars(**ctx.to_log_context())

        try:
            # Store on request state for easy access
            request.state.correlation_id = ctx.correlation_id
            request.state.correlation_context = ctx

            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception("Unhandled error while processing request")
                response = internal_error_response(exc)

            response.headers[CORRELATION_ID_HEADER] = ctx.correlation_id
            return response
        finally:
            clear_contextvars()
            _correlation_context.reset(token)


def internal_error_response(exc: Exception) -> JSONResponse:
    """JSON 500 body; the exception text is only exposed in debug mode."""
    from toggle_demo.schemas.common import ErrorResponse

    body = ErrorResponse.internal(exc, debug=settings.debug)
    return JSONResponse(status_code=500, content=body.model_dump())
