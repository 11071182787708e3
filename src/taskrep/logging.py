"""Logging configuration for TaskRep components.

Usage:
    from taskrep.logging import configure_logging

    configure_logging(level="DEBUG")
    log = structlog.get_logger()
    log.info("Server starting", port=5000)
"""

from __future__ import annotations

import logging
import sys

import structlog

# Track if logging has been configured
_configured = False


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = False,
    colors: bool | None = None,
    force: bool = False,
) -> None:
    """Configure structlog for the process.

    Call this once at application startup before any logging. Repeated calls
    are ignored unless ``force`` is set.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON output for production/log aggregation
        colors: Enable colors (auto-detect TTY if None)
        force: Reconfigure even if logging was already configured
    """
    global _configured
    if _configured and not force:
        return

    if colors is None:
        colors = sys.stderr.isatty()

    _configure_stdlib_logging(level)

    if json_output:
        renderer: structlog.typing.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event=30)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    _configured = True


def _configure_stdlib_logging(level: str) -> None:
    """Configure stdlib logging and suppress noisy third-party logs."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    for logger_name in ("uvicorn.access", "uvicorn.error", "httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)
