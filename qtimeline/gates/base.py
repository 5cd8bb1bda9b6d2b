"""The transformer capability shared by gates and circuits.

Anything exposing ``name``, ``matrix``, ``n_inputs``, ``n_outputs`` and
``kind`` can be scheduled on a circuit timeline. Concrete gates are
:class:`Gate` values tagged with a :class:`GateKind`; circuits carry the
``CIRCUIT`` tag and are nested by reference, so expansion and flattening
recurse through them explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Tuple, Union, runtime_checkable

from qtimeline.errors import ArityMismatchError, DimensionMismatchError, InvalidShapeError
from qtimeline.maths.matrix import AmplitudeMatrix, adjoint, multiply, transpose
from qtimeline.state.qubit import Qubit

if TYPE_CHECKING:
    from qtimeline.state.register import Register


class GateKind(Enum):
    """Closed set of transformer variants."""

    PRIMITIVE = "primitive"
    PARAMETERIZED = "parameterized"
    CONTROLLED = "controlled"
    MULTI_CONTROLLED = "multi_controlled"
    POWERED = "powered"
    COMPILED = "compiled"
    UNIVERSAL = "universal"
    CIRCUIT = "circuit"


@runtime_checkable
class Transformer(Protocol):
    """A unitary acting on a fixed number of qubits."""

    @property
    def name(self) -> str: ...

    @property
    def matrix(self) -> AmplitudeMatrix: ...

    @property
    def n_inputs(self) -> int: ...

    @property
    def n_outputs(self) -> int: ...

    @property
    def kind(self) -> GateKind: ...

    def transform(self, input: "TransformInput") -> AmplitudeMatrix: ...


TransformInput = Union[AmplitudeMatrix, Qubit, "Register"]


def as_column(input: TransformInput) -> AmplitudeMatrix:
    """Amplitude column for a matrix, qubit or register input."""
    if isinstance(input, AmplitudeMatrix):
        if input.rows == 1 and input.columns > 1:
            return transpose(input)
        return input
    return input.matrix_representation()


class TransformerMixin:
    """Operations derived from ``matrix`` and the input arity."""

    def transform(self, input: TransformInput) -> AmplitudeMatrix:
        """
        Apply the transformation matrix to an amplitude vector.

        Raises
        ------
        DimensionMismatchError
            If the input does not hold ``2**n_inputs`` amplitudes.
        """
        vector = as_column(input)
        matrix = self.matrix
        if vector.rows != matrix.columns:
            raise DimensionMismatchError(
                f"{self.name} expects {matrix.columns} amplitudes, got {vector.rows}."
            )
        return multiply(matrix, vector)

    def apply(self, *qubits: Qubit) -> Union[Qubit, AmplitudeMatrix]:
        """
        Apply the transformer to individual qubits.

        A unary transformer returns the resulting qubit; larger arities return
        the joint amplitude column, which may be entangled.
        """
        if len(qubits) != self.n_inputs:
            raise ArityMismatchError(
                f"{self.name} takes {self.n_inputs} qubits, got {len(qubits)}."
            )
        output = self.transform(Qubit.joint_matrix(qubits))
        if self.n_inputs == 1:
            return Qubit.from_matrix(output)
        return output

    def apply_each(self, register: "Register") -> "Register":
        """Apply a unary transformer to every qubit of a register."""
        from qtimeline.state.register import Register

        if self.n_inputs != 1:
            raise ArityMismatchError(
                f"apply_each needs a single-qubit transformer, {self.name} "
                f"takes {self.n_inputs}."
            )
        return Register(self.apply(q) for q in register)

    def __str__(self) -> str:
        return self.name


def qubit_count(matrix: AmplitudeMatrix) -> int:
    """Number of qubits a square ``2**n`` matrix acts on."""
    size = matrix.rows
    if not matrix.is_square or size < 2 or size & (size - 1):
        raise InvalidShapeError(
            f"A gate matrix must be square with a power-of-two size >= 2, "
            f"got {matrix.rows}x{matrix.columns}."
        )
    return size.bit_length() - 1


@dataclass(frozen=True, eq=False)
class Gate(TransformerMixin):
    """
    A transformer with an explicit matrix.

    Attributes
    ----------
    kind:
        Which construction rule produced the gate.
    name:
        Display and serialization name, e.g. ``"|H|"``.
    matrix:
        Square ``2**n_inputs`` transformation matrix. Read-only: derived
        gates and circuit caches share it, so copy before writing.
    n_inputs, n_outputs:
        Arity; equal for every unitary gate.
    parameter:
        Real parameter of parameterized gates.
    operands:
        Transformers the gate was derived from, if any.
    """

    kind: GateKind
    name: str
    matrix: AmplitudeMatrix
    n_inputs: int
    n_outputs: int
    parameter: Optional[float] = None
    operands: Tuple[object, ...] = ()

    def __post_init__(self) -> None:
        expected = 1 << self.n_inputs
        if self.matrix.shape != (expected, expected):
            raise InvalidShapeError(
                f"Gate {self.name} on {self.n_inputs} qubits needs a "
                f"{expected}x{expected} matrix, got {self.matrix.rows}x{self.matrix.columns}."
            )

    @property
    def short_name(self) -> str:
        """Name without the surrounding bars."""
        return self.name.strip("|")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Gate):
            return NotImplemented
        return (
            self.name == other.name
            and self.n_inputs == other.n_inputs
            and self.matrix == other.matrix
        )

    def __hash__(self) -> int:
        return hash((self.name, self.n_inputs))

    def __repr__(self) -> str:
        return f"Gate({self.name!r}, kind={self.kind.value}, n_inputs={self.n_inputs})"


def is_self_adjoint(transformer: Transformer) -> bool:
    """True when the transformer's matrix equals its conjugate transpose."""
    return transformer.matrix == adjoint(transformer.matrix)


__all__ = [
    "GateKind",
    "Transformer",
    "TransformerMixin",
    "TransformInput",
    "Gate",
    "as_column",
    "qubit_count",
    "is_self_adjoint",
]
