"""Logging configuration using loguru.

Routes stdlib logging (uvicorn, httpx, sqlalchemy, alembic) into loguru so a
reset produces one uniformly formatted stream.  Every line carries the shard
being reset (``extra["shard"]``, ``-`` outside a reset); the orchestrator binds
it with ``logger.contextualize``.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[shard]: <14}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine", "sqlalchemy.pool")


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, attributed to the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """Make loguru the only sink.  Call once per process (server or CLI run)."""
    level = level.upper()

    logger.configure(
        handlers=[{"sink": sys.stderr, "level": level, "format": _FORMAT}],
        extra={"shard": "-"},
    )
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging initialised (level={})", level)
