# emoji_index/shared/logging_setup.py
"""
Central logging configuration.

Modules log through structlog with event-style calls:

    import structlog
    logger = structlog.get_logger()
    logger.info("cache_saved", source="gemoji", count=1870)

Entry points call ``init_logging()`` once; it is idempotent. Events go through
the standard ``logging`` module, rendered either for a terminal or as JSON
lines (``EMOJI_INDEX_LOG_FORMAT``).
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from emoji_index.shared.config import LogFormat, settings

_INITIALIZED = False


def _level(name: Optional[str]) -> int:
    return getattr(logging, (name or settings.LOG_LEVEL).upper(), logging.INFO)


def init_logging(
    level: Optional[str] = None,
    fmt: Optional[LogFormat] = None,
    *,
    force: bool = False,
) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Level name (e.g. "DEBUG"); defaults to settings.LOG_LEVEL.
        fmt: Renderer; defaults to settings.LOG_FORMAT.
        force: Reconfigure even if already initialized.
    """
    global _INITIALIZED

    if _INITIALIZED and not force:
        return

    log_level = _level(level)
    fmt = fmt or settings.LOG_FORMAT

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    if fmt == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _INITIALIZED = True


__all__ = ["init_logging"]
