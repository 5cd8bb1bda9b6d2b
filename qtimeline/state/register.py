"""Ordered qubit registers.

Qubit 0 is the most significant factor of the joint amplitude vector, so the
register built from the integer 6 on three qubits reads ``|110⟩``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import torch

from qtimeline.maths.approx import approx_equal
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.state.qubit import Qubit

if TYPE_CHECKING:
    from qtimeline.gates.base import Transformer


class Register:
    """
    An ordered sequence of qubits.

    Parameters
    ----------
    qubits:
        Qubits in register order; they are copied.
    """

    def __init__(self, qubits: Iterable[Qubit]) -> None:
        self._qubits: List[Qubit] = [q.copy() for q in qubits]
        if not self._qubits:
            raise ValueError("A register needs at least one qubit.")

    @classmethod
    def from_int(cls, value: int, min_qubits: int = 0) -> "Register":
        """
        Classical register holding ``value`` in binary.

        The width is the bit length of ``value`` (at least one qubit), padded
        with leading grounded qubits up to ``min_qubits``.
        """
        if value < 0:
            raise ValueError(f"Register values must be >= 0, got {value}.")
        width = max(value.bit_length(), 1, min_qubits)
        bits = format(value, f"0{width}b")
        return cls(Qubit.from_bit(b) for b in bits)

    @classmethod
    def from_bits(cls, bits: str) -> "Register":
        """Register from a bitstring such as ``"0101"``."""
        if not bits or set(bits) - {"0", "1"}:
            raise ValueError(f"Invalid bitstring {bits!r}.")
        return cls(Qubit.from_bit(b) for b in bits)

    @classmethod
    def zeros(cls, n_qubits: int) -> "Register":
        """``n_qubits`` grounded qubits."""
        if n_qubits < 1:
            raise ValueError(f"n_qubits must be >= 1, got {n_qubits}.")
        return cls(Qubit.grounded() for _ in range(n_qubits))

    @classmethod
    def hadamard(cls, n_qubits: int) -> "Register":
        """``n_qubits`` qubits each in the equal superposition."""
        from qtimeline.gates.standard import H

        return H().apply_each(cls.zeros(n_qubits))

    @property
    def qubits(self) -> Tuple[Qubit, ...]:
        return tuple(self._qubits)

    @property
    def n_qubits(self) -> int:
        return len(self._qubits)

    @property
    def n_states(self) -> int:
        """Number of basis states the register spans (``2**n``)."""
        return 1 << len(self._qubits)

    def __len__(self) -> int:
        return len(self._qubits)

    def __getitem__(self, index: int) -> Qubit:
        return self._qubits[index]

    def __setitem__(self, index: int, qubit: Qubit) -> None:
        self._qubits[index] = qubit.copy()

    def __iter__(self) -> Iterator[Qubit]:
        return iter(self._qubits)

    def append(self, other: "Register | Qubit") -> "Register":
        """Return a new register with ``other``'s qubits after this one's."""
        extra: Sequence[Qubit] = [other] if isinstance(other, Qubit) else list(other)
        return Register(self._qubits + list(extra))

    def copy(self) -> "Register":
        return Register(self._qubits)

    def matrix_representation(self) -> AmplitudeMatrix:
        """Joint amplitude column of length ``2**n``."""
        return Qubit.joint_matrix(self._qubits)

    def amplitude(self, state_number: int) -> complex:
        """Amplitude of basis state ``state_number`` in the joint vector."""
        if not 0 <= state_number < self.n_states:
            raise IndexError(
                f"State {state_number} is out of range for {self.n_qubits} qubits."
            )
        amplitude = 1.0 + 0j
        for position, qubit in enumerate(self._qubits):
            bit = (state_number >> (self.n_qubits - 1 - position)) & 1
            amplitude *= qubit.excited_amplitude if bit else qubit.ground_amplitude
        return amplitude

    def measure(self, generator: Optional[torch.Generator] = None) -> Dict[str, float]:
        """
        Probability of every possible bitstring.

        A register whose qubits are all classical short-circuits to its single
        bitstring with probability 1.0.
        """
        bits = []
        for qubit in self._qubits:
            if approx_equal(qubit.ground_amplitude, 1.0):
                bits.append("0")
            elif approx_equal(qubit.excited_amplitude, 1.0):
                bits.append("1")
            else:
                break
        else:
            return {"".join(bits): 1.0}

        from qtimeline.measurement.measurer import Measurer

        return Measurer(self.matrix_representation(), generator=generator).probabilistic_map()

    def most_probable_integer_value(
        self, generator: Optional[torch.Generator] = None
    ) -> Tuple[int, float]:
        from qtimeline.measurement.measurer import Measurer

        return Measurer(self.matrix_representation(), generator=generator).most_probable_integer_value()

    def transformed(
        self,
        circuit: "Transformer",
        generator: Optional[torch.Generator] = None,
    ) -> "Register":
        """
        Apply ``circuit`` and collapse to the most probable classical register.

        Superposition is lost; work with :meth:`Circuit.transform` directly to
        keep the amplitudes.
        """
        from qtimeline.measurement.measurer import Measurer

        output = circuit.transform(self.matrix_representation())
        value, _ = Measurer(output, generator=generator).most_probable_integer_value()
        width = int(math.log2(output.rows))
        return Register.from_int(value, min_qubits=width)

    def transform(
        self,
        circuit: "Transformer",
        generator: Optional[torch.Generator] = None,
    ) -> None:
        """In-place version of :meth:`transformed`."""
        self._qubits = list(self.transformed(circuit, generator=generator))

    def to_int(self) -> int:
        """Integer encoded by a classical register (most probable bit per qubit)."""
        value = 0
        for qubit in self._qubits:
            value = (value << 1) | (1 if qubit.excited_probability > 0.5 else 0)
        return value

    def _arithmetic(self):
        from qtimeline.algorithms import arithmetic

        return arithmetic

    def increment(self) -> "Register":
        return self._arithmetic().IncrementerCircuit(self.n_qubits).increment(self)

    def decrement(self) -> "Register":
        return self._arithmetic().DecrementerCircuit(self.n_qubits).decrement(self)

    def __add__(self, other: "Register") -> "Register":
        return self._arithmetic().add_registers(self, other)

    def __sub__(self, other: "Register") -> "Register":
        return self._arithmetic().subtract_registers(self, other)

    def _bitwise(self, other: "Register", op) -> "Register":
        left, right = align_registers(self, other)
        return Register(op(a, b) for a, b in zip(left, right))

    def __and__(self, other: "Register") -> "Register":
        return self._bitwise(other, lambda a, b: a & b)

    def __or__(self, other: "Register") -> "Register":
        return self._bitwise(other, lambda a, b: a | b)

    def __xor__(self, other: "Register") -> "Register":
        return self._bitwise(other, lambda a, b: a ^ b)

    def __invert__(self) -> "Register":
        return Register(~q for q in self._qubits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Register):
            return NotImplemented
        return len(self) == len(other) and all(
            a == b for a, b in zip(self._qubits, other._qubits)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Register({self._qubits!r})"

    def __str__(self) -> str:
        return " ⊗ ".join(str(q) for q in self._qubits)


def align_registers(left: Register, right: Register) -> Tuple[List[Qubit], List[Qubit]]:
    """Pad the shorter register with leading grounded qubits."""
    width = max(len(left), len(right))

    def padded(register: Register) -> List[Qubit]:
        padding = [Qubit.grounded() for _ in range(width - len(register))]
        return padding + list(register)

    return padded(left), padded(right)


__all__ = ["Register", "align_registers"]
