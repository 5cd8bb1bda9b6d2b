"""Teleportation with the classical corrections deferred to controlled gates."""

from __future__ import annotations

from qtimeline.circuit.core import Circuit
from qtimeline.gates.derived import controlled_gate
from qtimeline.gates.standard import CNOT, H, Z
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.measurement.measurer import Measurer
from qtimeline.state.qubit import Qubit
from qtimeline.state.register import Register


class TeleportationCircuit(Circuit):
    """
    Moves the state of qubit 0 onto qubit 2.

    Qubits 1 and 2 are entangled into a Bell pair, qubit 0 is measured in the
    Bell basis against qubit 1, and the X and Z corrections are applied to
    qubit 2 as controlled gates. The final Hadamards return qubits 0 and 1 to
    ``|0⟩``, so the output is ``|0⟩|0⟩|psi⟩``.
    """

    def __init__(self) -> None:
        super().__init__("|TEL|", 3)
        h = H()
        cnot = CNOT()
        self.extend(
            [
                (h, 0, 1),
                (cnot, 1, [1, 2]),
                (cnot, 2, [0, 1]),
                (h, 3, 0),
                (cnot, 4, [1, 2]),
                (controlled_gate(Z()), 5, [0, 2]),
                (h, 6, 0),
                (h, 6, 1),
            ]
        )

    def teleport(self, qubit: Qubit) -> AmplitudeMatrix:
        """Amplitudes after teleporting ``qubit`` from position 0 to 2."""
        register = Register([qubit, Qubit.grounded(), Qubit.grounded()])
        return self.transform(register)

    def teleported_qubit(self, qubit: Qubit) -> Qubit:
        """The received qubit, read from position 2 of the output."""
        return Measurer(self.teleport(qubit)).entangled_qubits()[2]


__all__ = ["TeleportationCircuit"]
