"""Logging setup shared by the server entry point and the app factory."""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Loggers that follow the configured level
ARENA_LOGGERS = ("arena", "backend")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(level: Optional[str] = None) -> str:
    """Explicit level, else ``ARENA_LOG_LEVEL``, else INFO."""
    raw = level if level is not None else os.getenv("ARENA_LOG_LEVEL")
    resolved = (raw or "INFO").strip().upper()
    if resolved not in logging.getLevelNamesMapping():
        return "INFO"
    return resolved


def configure_logging(
    *,
    level: Optional[str] = None,
    include_uvicorn: bool = True,
    extra_loggers: Optional[Iterable[str]] = None,
) -> logging.Logger:
    """Configure process logging; safe to call more than once.

    ``basicConfig`` only installs a handler the first time, later calls just
    re-apply the level to the arena, backend and uvicorn loggers.

    Returns:
        The ``arena.backend`` logger.
    """
    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    names = list(ARENA_LOGGERS)
    if include_uvicorn:
        names.extend(UVICORN_LOGGERS)
    if extra_loggers:
        names.extend(extra_loggers)
    for name in names:
        logging.getLogger(name).setLevel(resolved)

    app_logger = logging.getLogger("arena.backend")
    app_logger.debug("Logging configured at %s", resolved)
    return app_logger
