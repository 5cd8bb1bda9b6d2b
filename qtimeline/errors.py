"""Error types raised by qtimeline.

All errors derive from ``ValueError``: they are local validation failures
surfaced at the offending call and never corrected silently.
"""

from __future__ import annotations


class QTimelineError(ValueError):
    """Base class of every error raised by the simulator."""


class DimensionMismatchError(QTimelineError):
    """Matrix or vector sizes are incompatible with the requested operation."""


class IndexOutOfRangeError(QTimelineError):
    """A qubit index does not address a qubit of the circuit."""


class ArityMismatchError(QTimelineError):
    """The number of target indices differs from a transformer's inputs."""


class InvalidShapeError(QTimelineError):
    """A matrix has a shape the operation cannot accept."""


class TimelineCollisionError(QTimelineError):
    """Entries scheduled at one time step act on overlapping qubits."""


class CircuitFormatError(QTimelineError):
    """A serialized circuit is missing fields or carries inconsistent data."""


__all__ = [
    "QTimelineError",
    "DimensionMismatchError",
    "IndexOutOfRangeError",
    "ArityMismatchError",
    "InvalidShapeError",
    "TimelineCollisionError",
    "CircuitFormatError",
]
