"""Structured logging setup."""

import logging
import sys
from functools import lru_cache

import structlog
from structlog.types import Processor

from config.settings import settings


def get_processors() -> list[Processor]:
    """Console output in development, JSON lines everywhere else."""
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.environment == "development":
        return shared + [structlog.dev.ConsoleRenderer()]
    return shared + [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


@lru_cache(maxsize=1)
def setup_logging(level: str | None = None) -> None:
    """Configure stdlib logging and structlog. Safe to call more than once."""
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
    )
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
