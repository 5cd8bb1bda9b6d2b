"""Qubits, registers and measurement outcomes."""

from .qubit import Outcome, Qubit, QubitState
from .register import Register, align_registers

__all__ = ["Outcome", "Qubit", "QubitState", "Register", "align_registers"]
