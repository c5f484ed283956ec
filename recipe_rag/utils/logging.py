"""
Structured logging setup.

Usage:
    from recipe_rag.utils.logging import get_logger
    logger = get_logger("recipe_rag.pipeline.retrieval")
    logger.info("[RETRIEVAL] vector returned %d results", n)
"""

from __future__ import annotations

import logging
import sys

from recipe_rag.core.config import settings


_configured = False


def setup_logging(level: int | str | None = None) -> None:
    """Configure the ``recipe_rag`` logger hierarchy once per process."""
    global _configured
    if _configured:
        return

    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger("recipe_rag")
    root.setLevel(level)
    root.addHandler(handler)
    root.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the ``recipe_rag`` namespace.

    Automatically calls ``setup_logging()`` on first use to ensure
    the root handler is attached.
    """
    setup_logging()
    return logging.getLogger(name)
