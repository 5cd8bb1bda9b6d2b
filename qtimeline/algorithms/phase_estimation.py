"""Quantum phase estimation of an eigenvalue ``e^{2 pi i phi}`` of a unitary."""

from __future__ import annotations

import math
from typing import Optional, Tuple, Union

import torch

from qtimeline.circuit.core import Circuit
from qtimeline.gates.base import Transformer
from qtimeline.gates.derived import multi_controlled_gate, universal_gate
from qtimeline.gates.standard import QFT, H
from qtimeline.maths.matrix import AmplitudeMatrix, matrix_power
from qtimeline.measurement.measurer import Measurer
from qtimeline.state.register import Register


def counting_qubits(precision: int, error_probability: float) -> int:
    """
    Counting-register width giving ``precision`` bits of the phase with
    success probability at least ``1 - error_probability``.
    """
    if precision < 1:
        raise ValueError(f"precision must be >= 1, got {precision}.")
    if not 0.0 < error_probability < 1.0:
        raise ValueError(
            f"error_probability must lie in (0, 1), got {error_probability}."
        )
    return precision + int(math.ceil(math.log2(2.0 + 1.0 / (2.0 * error_probability))))


class PhaseEstimationCircuit(Circuit):
    """
    Phase estimation for ``operator`` with ``t`` counting qubits.

    Counting qubit ``k`` (qubit 0 being the most significant) controls
    ``U^(2^(t-1-k))`` on the operator register, which holds qubits
    ``t .. t+m-1``. Each controlled power is computed once with
    :func:`matrix_power` and stored as a single universal gate. The inverse
    QFT on the counting register then leaves ``|phi * 2^t⟩`` there.
    """

    def __init__(
        self,
        operator: Transformer,
        precision: int,
        error_probability: float = 0.1,
    ) -> None:
        n_counting = counting_qubits(precision, error_probability)
        label = operator.name.strip("|")
        super().__init__(
            f"|PhaseEstimation-{label} {n_counting}-Precision|",
            n_counting + operator.n_inputs,
        )
        self.operator = operator
        self.n_counting = n_counting

        h = H()
        for k in range(n_counting):
            self.append(h, 0, k)

        controlled = multi_controlled_gate(1, operator)
        targets = list(range(n_counting, self.n_inputs))
        for k in range(n_counting):
            exponent = 1 << (n_counting - 1 - k)
            gate = universal_gate(
                matrix_power(controlled.matrix, exponent),
                name=f"|C-{label}^{exponent}|",
                n_inputs=controlled.n_inputs,
                n_outputs=controlled.n_outputs,
            )
            self.append(gate, 1 + k, [k] + targets)

        self.append(QFT(n_counting, inverse=True), 1 + n_counting, list(range(n_counting)))

    def estimate_phase(
        self,
        eigenvector: Union[Register, AmplitudeMatrix],
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[float, float]:
        """
        Estimate the phase for an eigenvector of the operator.

        Args:
            eigenvector: State of the operator register alone (a register, or
                an amplitude column over all qubits of the circuit).
            generator: Tie-breaking random source for the measurement.

        Returns:
            ``(phase, probability)`` with ``phase`` in ``[0, 1)``.
        """
        if isinstance(eigenvector, Register):
            eigenvector = Register.zeros(self.n_counting).append(eigenvector).matrix_representation()
        output = self.transform(eigenvector)
        value, probability = Measurer(output, generator=generator).most_probable_integer_value()
        numerator = value >> (self.n_inputs - self.n_counting)
        return numerator / float(1 << self.n_counting), probability


__all__ = ["PhaseEstimationCircuit", "counting_qubits"]
