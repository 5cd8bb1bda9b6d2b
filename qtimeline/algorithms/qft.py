"""
Quantum Fourier transform as a gate-level circuit.

Reference: M. A. Nielsen and I. L. Chuang, *Quantum Computation and Quantum
Information*, section 5.1.
"""

from __future__ import annotations

import math

from qtimeline.circuit.core import Circuit
from qtimeline.gates.derived import controlled_gate
from qtimeline.gates.standard import SWAP, H, phase_shift


class FlipCircuit(Circuit):
    """Reverse the qubit order: qubit ``k`` swaps with ``n - 1 - k``."""

    def __init__(self, n_inputs: int) -> None:
        super().__init__(f"|Flip-{n_inputs}|", n_inputs)
        swap = SWAP()
        for k in range(n_inputs // 2):
            self.append(swap, 0, [k, n_inputs - 1 - k])


def qft_circuit(n_qubits: int, inverse: bool = False) -> Circuit:
    """
    Sequential QFT: a Hadamard on each qubit followed by controlled phase
    shifts from every less significant qubit, then a qubit reversal.

    The QFT matrix is symmetric, so negating every angle yields its inverse.
    The result has the same matrix as :func:`qtimeline.gates.standard.QFT`.
    """
    name = f"|{'InvQuFT' if inverse else 'QuFT'}-{n_qubits}|"
    circuit = Circuit(name, n_qubits)
    h = H()

    time = 0
    for target in range(n_qubits):
        circuit.append(h, time, target)
        time += 1
        for distance in range(1, n_qubits - target):
            angle = math.pi / (1 << distance)
            gate = controlled_gate(phase_shift(-angle if inverse else angle))
            circuit.append(gate, time, [target + distance, target])
            time += 1

    circuit.append(FlipCircuit(n_qubits), time, list(range(n_qubits)))
    return circuit


__all__ = ["FlipCircuit", "qft_circuit"]
