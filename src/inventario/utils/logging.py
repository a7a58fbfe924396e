"""Logging helpers for Inventario."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    """Return the package logger, attaching a stream handler on first use."""

    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger("inventario")
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            handler.setFormatter(formatter)
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(logging.INFO)
    return _LOGGER


def set_level(level: str | int) -> None:
    """Apply *level* (name or number) to the package logger."""

    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            get_logger().warning("Unknown log level %r, keeping INFO", level)
            resolved = logging.INFO
    else:
        resolved = level
    get_logger().setLevel(resolved)


logger = get_logger()
