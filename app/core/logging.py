"""Structured logging setup.

Console output in development, JSON lines everywhere else. Modules obtain a
logger with ``get_logger(__name__)`` and log events with keyword context::

    logger = get_logger(__name__)
    logger.info("academic_year_created", academic_year_id=str(ay.id))
"""

import logging
import sys
from typing import TYPE_CHECKING, List

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from app.core.config import Settings


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and the stdlib root logger from settings."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_development:
        processors: List[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    quiet = ["sqlalchemy", "httpx", "httpcore", "asyncio"]
    if not settings.is_development:
        # Request lines come from the http_request event in development only.
        quiet.append("uvicorn.access")
    for logger_name in quiet:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
