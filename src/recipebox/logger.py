"""Logging setup shared by the store, the template registry and the CLI."""

from __future__ import annotations

import sys

from loguru import logger

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> | <level>{message}</level>"

_handler_id: int | None = None


def configure_logging(level: str = DEFAULT_LEVEL) -> None:
    """Replace the default loguru sink with a single stderr sink at ``level``."""
    global _handler_id

    if _handler_id is None:
        logger.remove()
    else:
        logger.remove(_handler_id)
    _handler_id = logger.add(
        sys.stderr,
        level=normalize_level(level),
        format=LOG_FORMAT,
        colorize=None,
    )


def normalize_level(level: object) -> str:
    text = str(level or "").strip().upper()
    if text in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
        return text
    return DEFAULT_LEVEL


__all__ = ["logger", "configure_logging", "normalize_level"]
