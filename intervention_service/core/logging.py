"""Structured logging configuration."""

import logging
import sys
import structlog
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import add_logger_name

from intervention_service.core.config import settings

# Third-party loggers that echo every request or multipart chunk at INFO/DEBUG
NOISY_LOGGERS = ("python_multipart", "multipart", "aiocache")


def setup_logging():
    """Configure structured logging.

    Production always logs JSON; elsewhere LOG_FORMAT picks JSON or console.
    """
    if settings.LOG_FORMAT == "json" or settings.is_production():
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            add_log_level,
            add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL),
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLogger().level))


def bind_upload_context(filename: str, digest: str) -> None:
    """Attach the current upload to every log line of this request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(upload=filename, upload_digest=digest[:12])
