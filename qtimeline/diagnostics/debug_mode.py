"""
Debug mode: extra runtime checks on simulation results.

When enabled, ``Circuit.transform`` and ``Circuit.evolve`` verify that their
output is still a unit vector, and ``universal_gate`` rejects matrices that
are not unitary. The checks cost one norm or one matrix product per call, so
they are off unless ``QTIMELINE_DEBUG`` is set to a true value at import time
or switched on from code.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

_DEBUG_ENV_VAR = "QTIMELINE_DEBUG"
_TRUE_VALUES = ("1", "true", "yes", "on")


def _flag_from_env() -> bool:
    return os.getenv(_DEBUG_ENV_VAR, "0").strip().lower() in _TRUE_VALUES


_debug_enabled: bool = _flag_from_env()


def is_debug_enabled() -> bool:
    """Whether normalization and unitarity checks currently run."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """Switch the checks on or off for the whole process."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Run a block with the checks switched on (or off), then restore the
    previous setting even if the block raises.

    Example
    -------
    >>> from qtimeline.circuit import Circuit
    >>> from qtimeline.gates import standard
    >>> from qtimeline.state import Register
    >>> with debug_context(True):
    ...     _ = Circuit("|Had|", 1).append(standard.H(), 0, 0).transform(Register.zeros(1))
    """
    global _debug_enabled
    previous = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = previous
