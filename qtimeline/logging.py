"""Logging utilities for qtimeline.

Every module obtains its logger through :func:`get_logger` so that all
records share the ``qtimeline.`` prefix and a single stderr handler.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Args:
        name: Logger name, usually ``__name__``. ``None`` gives the package
            logger.

    Returns:
        Cached logger writing ``[LEVEL] name: message`` lines to stderr.

    Example:
        >>> from qtimeline.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("expanding gate")
    """
    if name is None:
        name = "qtimeline"

    logger_name = name if name.startswith("qtimeline") else f"qtimeline.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every qtimeline logger, current and future.

    Args:
        level: A ``logging`` level constant or its name (``"DEBUG"``, ...).
    """
    resolved = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(resolved)
        for handler in logger.handlers:
            handler.setLevel(resolved)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = resolved


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Reconfigure handlers of all qtimeline loggers.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses the default.
        stream: Output stream (default: sys.stderr).
    """
    resolved = _resolve_level(level)
    if stream is None:
        stream = sys.stderr
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(resolved)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(resolved)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = resolved


__all__ = ["get_logger", "set_log_level", "configure_logging"]
