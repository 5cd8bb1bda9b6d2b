"""Decompositions of standard gates into other standard gates."""

from __future__ import annotations

from qtimeline.circuit.core import Circuit
from qtimeline.gates.standard import CNOT, H, X, Z


def swap_circuit() -> Circuit:
    """SWAP as three alternating CNOTs."""
    cnot = CNOT()
    return Circuit("|Swap|", 2).extend(
        [
            (cnot, 0, [0, 1]),
            (cnot, 1, [1, 0]),
            (cnot, 2, [0, 1]),
        ]
    )


def x_circuit() -> Circuit:
    """X = H Z H."""
    h = H()
    return Circuit("|X|", 1).extend([(h, 0, 0), (Z(), 1, 0), (h, 2, 0)])


def z_circuit() -> Circuit:
    """Z = H X H."""
    h = H()
    return Circuit("|Z|", 1).extend([(h, 0, 0), (X(), 1, 0), (h, 2, 0)])


__all__ = ["swap_circuit", "x_circuit", "z_circuit"]
