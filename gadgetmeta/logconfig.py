"""
Logging configuration.

Provides a single entry point for configuring structured logging.

Configuration is read from arguments or environment variables:
- GADGETMETA_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- GADGETMETA_LOG_FORMAT: json | console (default: console)

Usage:
    # Configure at application startup
    from gadgetmeta.logconfig import configure_logging
    configure_logging()

    # Or with explicit settings
    configure_logging(level="DEBUG", format="json")

Modules log through structlog:
    logger = structlog.get_logger(__name__)
    logger.info("batch_completed", gadgets=3, failed=1)
"""

import logging
import os
import sys
from typing import List, Optional

import structlog
from structlog.types import Processor


# Track if logging has been configured
_configured = False


def configure_logging(
    level: Optional[str] = None,
    format: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Should be called once at application startup (CLI entry, server
    startup). Subsequent calls are no-ops unless force=True.

    Args:
        level: Log level (overrides GADGETMETA_LOG_LEVEL)
        format: "json" or "console" (overrides GADGETMETA_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("GADGETMETA_LOG_LEVEL", "INFO")).upper()
    log_format = (format or os.environ.get("GADGETMETA_LOG_FORMAT", "console")).lower()
    level_num = getattr(logging, log_level, logging.INFO)

    processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Log lines go to stderr so stdout stays clean for JSON responses
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level_num,
        force=True,
    )
    logging.getLogger("gadgetmeta").setLevel(level_num)

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured
