"""
Structured logging setup.

Everything goes through structlog. Stdlib loggers (uvicorn, the ConfigCat
SDK) are rendered by the same processor chain, so every line emitted while a
request is in flight carries the ambient context bound by the correlation
middleware (correlation_id, request_uri, ...).

Usage:
    from toggle_demo.core.logging import configure_logging

    configure_logging(level="INFO", fmt="json")

    logger = structlog.get_logger()
    logger.info("Payment processed", transaction_id=tx_id)
"""

import logging
import sys

import structlog


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_logging(
    level: str = "INFO",
    fmt: str = "json",
    sdk_level: str = "WARNING",
) -> None:
    """
    Configure structlog and route stdlib logging through it.

    Args:
        level: Root log level
        fmt: "json" for machine-readable lines, "console" for local dev
        sdk_level: Level for the ConfigCat SDK logger
    """
    if fmt == "console":
        # ConsoleRenderer formats exceptions itself
        render_chain = [structlog.dev.ConsoleRenderer()]
    else:
        render_chain = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *render_chain,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())

    logging.getLogger("configcat").setLevel(sdk_level.upper())

    # uvicorn installs its own handlers; let records propagate to ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True
