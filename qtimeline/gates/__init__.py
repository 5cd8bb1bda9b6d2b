"""Gate capability, derived-gate constructors and the standard gate library."""

from .base import Gate, GateKind, Transformer, TransformerMixin, is_self_adjoint, qubit_count
from .derived import (
    adjoint_gate,
    compiled_gate,
    controlled_gate,
    double_controlled_gate,
    multi_controlled_gate,
    powered_gate,
    universal_gate,
)

__all__ = [
    "Gate",
    "GateKind",
    "Transformer",
    "TransformerMixin",
    "is_self_adjoint",
    "qubit_count",
    "controlled_gate",
    "double_controlled_gate",
    "multi_controlled_gate",
    "powered_gate",
    "compiled_gate",
    "universal_gate",
    "adjoint_gate",
]
