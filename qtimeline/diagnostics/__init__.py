"""Diagnostics and debugging utilities for qtimeline."""

from .analyzer import truth_table
from .core import (
    assert_normalized,
    assert_unitary,
    bloch_sphere_coordinates,
    bloch_vector,
    is_unitary,
    state_norm,
)
from .debug_mode import debug_context, is_debug_enabled, set_debug_enabled

__all__ = [
    "state_norm",
    "assert_normalized",
    "is_unitary",
    "assert_unitary",
    "bloch_vector",
    "bloch_sphere_coordinates",
    "truth_table",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
