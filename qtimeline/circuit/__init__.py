"""Circuit timelines, qubit lifting and evaluation."""

from .core import Circuit, TimelineEntry
from .expansion import apply_to_state, expand_matrix, lifting_indices

__all__ = [
    "Circuit",
    "TimelineEntry",
    "expand_matrix",
    "apply_to_state",
    "lifting_indices",
]
