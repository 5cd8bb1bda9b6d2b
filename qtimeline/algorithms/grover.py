"""
Grover search over an oracle acting on ``n - 1`` data qubits and one ancilla.

The oracle flips the ancilla (the last qubit) for marked inputs. With the
ancilla prepared in ``|-⟩`` this flips the sign of the marked amplitudes, and
the diffusion step then reflects the data register about the mean.
"""

from __future__ import annotations

import math
from typing import Optional

from qtimeline.circuit.core import Circuit
from qtimeline.gates.base import Transformer
from qtimeline.gates.derived import multi_controlled_gate
from qtimeline.gates.standard import H, X, Z
from qtimeline.logging import get_logger
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.state.qubit import Qubit
from qtimeline.state.register import Register

logger = get_logger(__name__)


def optimal_iterations(n_data_qubits: int) -> int:
    """
    ``floor(pi/4 * sqrt(2**n))``, the iteration count for one marked item.

    This deliberately differs from the simpler ``ceil(sqrt(n_inputs))``
    round count. Both give 3 for four data qubits, but elsewhere the
    simpler count over- or undershoots; with two data qubits it runs 2
    rounds where 1 finds the marked item with certainty.
    """
    return max(1, int(math.floor(math.pi / 4.0 * math.sqrt(1 << n_data_qubits))))


def diffusion_circuit(n_qubits: int) -> Circuit:
    """Inversion about the mean, ``H X (C..CZ) X H`` on every qubit."""
    circuit = Circuit("Grov", n_qubits)
    h = H()
    x = X()
    everything = list(range(n_qubits))
    flip = Z() if n_qubits == 1 else multi_controlled_gate(n_qubits - 1, Z())

    for k in everything:
        circuit.append(h, 0, k)
        circuit.append(x, 1, k)
    circuit.append(flip, 2, everything)
    for k in everything:
        circuit.append(x, 3, k)
        circuit.append(h, 4, k)
    return circuit


class GroverCircuit(Circuit):
    """
    Grover search circuit around ``oracle``.

    Args:
        oracle: Transformer on ``n >= 2`` qubits, the last one being the
            ancilla it flips for marked inputs.
        iterations: Oracle plus diffusion rounds; defaults to
            :func:`optimal_iterations` of the data width.
    """

    def __init__(self, oracle: Transformer, iterations: Optional[int] = None) -> None:
        n_inputs = oracle.n_inputs
        if n_inputs < 2:
            raise ValueError(
                f"Grover needs an oracle with at least 2 inputs, got {n_inputs}."
            )
        super().__init__(f"|Grover-{n_inputs - 1} {oracle.name.strip('|')}|", n_inputs)
        if iterations is None:
            iterations = optimal_iterations(n_inputs - 1)
        self.oracle = oracle
        self.iterations = iterations

        h = H()
        ancilla = n_inputs - 1
        data = list(range(ancilla))
        diffusion = diffusion_circuit(ancilla)

        time = 0
        for k in range(n_inputs):
            self.append(h, time, k)
        time += 1
        for _ in range(iterations):
            self.append(oracle, time, list(range(n_inputs)))
            self.append(diffusion, time + 1, data)
            time += 2
        self.append(h, time, ancilla)
        self.append(X(), time + 1, ancilla)
        logger.debug("built %s with %d iterations", self.name, iterations)

    def evaluate(self) -> AmplitudeMatrix:
        """Run on ``|0...01⟩``, the data qubits grounded and the ancilla excited."""
        qubits = [Qubit.grounded() for _ in range(self.n_inputs - 1)]
        qubits.append(Qubit.excited())
        return self.transform(Register(qubits))


def bit_pattern_oracle(pattern: str) -> Circuit:
    """
    Oracle marking one data bitstring by flipping the ancilla.

    Grounded positions of ``pattern`` are inverted around a fully controlled X
    so the control fires only on that pattern.
    """
    if not pattern or set(pattern) - {"0", "1"}:
        raise ValueError(f"Oracle pattern must be a non-empty bitstring, got {pattern!r}.")
    n_inputs = len(pattern) + 1
    oracle = Circuit(f"|Oracle {pattern}|", n_inputs)
    x = X()
    zeros = [k for k, bit in enumerate(pattern) if bit == "0"]
    for k in zeros:
        oracle.append(x, 0, k)
    oracle.append(multi_controlled_gate(len(pattern), X()), 1, list(range(n_inputs)))
    for k in zeros:
        oracle.append(x, 2, k)
    return oracle


__all__ = [
    "GroverCircuit",
    "bit_pattern_oracle",
    "diffusion_circuit",
    "optimal_iterations",
]
