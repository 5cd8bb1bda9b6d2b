"""Single-qubit states and measurement outcomes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Optional, Sequence

import torch

from qtimeline.maths.approx import approx_equal, approx_zero
from qtimeline.maths.matrix import AmplitudeMatrix, format_amplitude, tensor_product


class Outcome(Enum):
    """Classical result of measuring one qubit."""

    GROUNDED = "grounded"
    EXCITED = "excited"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class QubitState:
    """
    A measured qubit outcome.

    Attributes
    ----------
    outcome:
        Which basis state was observed.
    probability:
        Probability of the outcome before collapse; None when undefined.
    """

    outcome: Outcome
    probability: Optional[float] = None

    @classmethod
    def grounded(cls, probability: float = 1.0) -> "QubitState":
        return cls(Outcome.GROUNDED, probability)

    @classmethod
    def excited(cls, probability: float = 1.0) -> "QubitState":
        return cls(Outcome.EXCITED, probability)

    @classmethod
    def undefined(cls) -> "QubitState":
        return cls(Outcome.UNDEFINED, None)

    @property
    def bit(self) -> Optional[str]:
        """``"0"``, ``"1"`` or None for an undefined outcome."""
        if self.outcome is Outcome.GROUNDED:
            return "0"
        if self.outcome is Outcome.EXCITED:
            return "1"
        return None

    def to_qubit(self) -> Optional["Qubit"]:
        """The pure qubit this outcome collapses to."""
        if self.outcome is Outcome.GROUNDED:
            return Qubit.grounded()
        if self.outcome is Outcome.EXCITED:
            return Qubit.excited()
        return None

    def __str__(self) -> str:
        if self.outcome is Outcome.UNDEFINED:
            return "undefined"
        return f"|{self.bit}⟩ (p={self.probability:.4g})"


def _snapped(probability: float) -> float:
    if approx_equal(probability, 1.0):
        return 1.0
    if approx_zero(probability):
        return 0.0
    return probability


class Qubit:
    """
    A two-level state ``ground|0⟩ + excited|1⟩``.

    Measuring collapses the qubit in place; every other operation leaves it
    untouched.
    """

    __slots__ = ("_ground", "_excited")

    def __init__(self, ground: complex = 1.0, excited: complex = 0.0) -> None:
        self._ground = complex(ground)
        self._excited = complex(excited)

    @classmethod
    def grounded(cls) -> "Qubit":
        return cls(1.0, 0.0)

    @classmethod
    def excited(cls) -> "Qubit":
        return cls(0.0, 1.0)

    @classmethod
    def superposed(cls) -> "Qubit":
        """The equal superposition ``(|0⟩ + |1⟩)/√2``."""
        amplitude = 1.0 / math.sqrt(2.0)
        return cls(amplitude, amplitude)

    @classmethod
    def from_bit(cls, bit: int | str) -> "Qubit":
        return cls.excited() if str(bit) == "1" else cls.grounded()

    @classmethod
    def from_matrix(cls, matrix: AmplitudeMatrix) -> Optional["Qubit"]:
        """Read a 2x1 or 1x2 amplitude matrix; other shapes give None."""
        if matrix.shape not in ((2, 1), (1, 2)):
            return None
        return cls(matrix[0], matrix[1])

    @property
    def ground_amplitude(self) -> complex:
        return self._ground

    @property
    def excited_amplitude(self) -> complex:
        return self._excited

    @property
    def ground_probability(self) -> float:
        return _snapped(abs(self._ground) ** 2)

    @property
    def excited_probability(self) -> float:
        return _snapped(abs(self._excited) ** 2)

    @property
    def is_normalized(self) -> bool:
        return approx_equal(abs(self._ground) ** 2 + abs(self._excited) ** 2, 1.0)

    @property
    def is_grounded(self) -> bool:
        return self.ground_probability == 1.0

    @property
    def is_excited(self) -> bool:
        return self.excited_probability == 1.0

    def measure(self, generator: Optional[torch.Generator] = None) -> QubitState:
        """
        Collapse the qubit and report the observed outcome.

        Parameters
        ----------
        generator:
            Random source; None uses torch's global generator.

        Returns
        -------
        QubitState
            The observed outcome with its pre-collapse probability, or an
            undefined state (and no collapse) when the qubit is not
            normalized.
        """
        if not self.is_normalized:
            return QubitState.undefined()

        p_ground = self.ground_probability
        p_excited = self.excited_probability
        if p_ground == 1.0:
            self._collapse(grounded=True)
            return QubitState.grounded(1.0)
        if p_excited == 1.0:
            self._collapse(grounded=False)
            return QubitState.excited(1.0)

        sample = float(torch.rand(1, generator=generator).item())
        if approx_equal(p_ground, p_excited):
            grounded = sample < 0.5
        else:
            grounded = sample < p_ground

        self._collapse(grounded=grounded)
        if grounded:
            return QubitState.grounded(p_ground)
        return QubitState.excited(p_excited)

    def _collapse(self, grounded: bool) -> None:
        self._ground, self._excited = (1.0 + 0j, 0j) if grounded else (0j, 1.0 + 0j)

    def matrix_representation(self) -> AmplitudeMatrix:
        """The qubit as a 2x1 amplitude column."""
        return AmplitudeMatrix.from_rows([[self._ground], [self._excited]])

    @staticmethod
    def joint_matrix(qubits: Sequence["Qubit"]) -> AmplitudeMatrix:
        """Tensor product of several qubits, first qubit most significant."""
        if not qubits:
            raise ValueError("joint_matrix requires at least one qubit.")
        return reduce(
            tensor_product, (q.matrix_representation() for q in qubits)
        )

    def copy(self) -> "Qubit":
        return Qubit(self._ground, self._excited)

    def _logic(self, gate_name: str, *operands: "Qubit") -> "Qubit":
        from qtimeline.gates import standard
        from qtimeline.measurement import Measurer

        gate = getattr(standard, gate_name)()
        qubits, _ = Measurer(gate.apply(*operands)).most_probable_qubits()
        return qubits[-1]

    def __invert__(self) -> "Qubit":
        from qtimeline.gates import standard

        return standard.X().apply(self)

    def __xor__(self, other: "Qubit") -> "Qubit":
        return self._logic("CNOT", self, other)

    def __and__(self, other: "Qubit") -> "Qubit":
        return self._logic("TOFFOLI", self, other, Qubit.grounded())

    def __or__(self, other: "Qubit") -> "Qubit":
        return self._logic("TOFFOLI", ~self, ~other, Qubit.excited())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Qubit):
            return NotImplemented
        return approx_equal(abs(self._ground), abs(other._ground)) and approx_equal(
            abs(self._excited), abs(other._excited)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Qubit(ground={self._ground!r}, excited={self._excited!r})"

    def __str__(self) -> str:
        if approx_zero(self._excited):
            return "|0⟩"
        if approx_zero(self._ground):
            return "|1⟩"
        return (
            f"({format_amplitude(self._ground)})|0⟩ + "
            f"({format_amplitude(self._excited)})|1⟩"
        )


__all__ = ["Outcome", "QubitState", "Qubit"]
