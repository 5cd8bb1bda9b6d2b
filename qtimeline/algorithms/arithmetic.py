"""
Reversible arithmetic circuits.

Registers are read most significant qubit first, so qubit ``n - 1`` is the
least significant bit. Multi-bit adders and subtractors lay out their
``3n + 1`` qubits as ``first | second | result | carry``; the carry ripples
from the least significant result slot towards the most significant one and
finally into the last qubit.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import torch

from qtimeline.circuit.core import Circuit
from qtimeline.gates.derived import multi_controlled_gate
from qtimeline.gates.standard import CNOT, TOFFOLI, X
from qtimeline.measurement.measurer import Measurer
from qtimeline.state.qubit import Qubit
from qtimeline.state.register import Register, align_registers


def _measure_qubits(
    circuit: Circuit, qubits: List[Qubit], generator: Optional[torch.Generator]
) -> List[Qubit]:
    output = circuit.evolve(Register(qubits))
    measured, _ = Measurer(output, generator=generator).most_probable_qubits()
    return measured


def _width_for_modulus(modulus: int) -> int:
    if modulus < 2:
        raise ValueError(f"modulus must be >= 2, got {modulus}.")
    return max(1, int(math.ceil(math.log2(modulus))))


class IncrementerCircuit(Circuit):
    """
    Adds one modulo ``2**n``.

    Bit ``i`` flips when every less significant bit is excited; bits are
    updated from the most significant down so each reads its controls before
    they change.
    """

    def __init__(self, n_inputs: int) -> None:
        super().__init__(f"|Inc-{n_inputs}|", n_inputs)
        time = 0
        for i in range(n_inputs - 1):
            gate = multi_controlled_gate(n_inputs - 1 - i, X())
            self.append(gate, time, list(range(n_inputs - 1, i - 1, -1)))
            time += 1
        self.append(X(), time, n_inputs - 1)

    @classmethod
    def from_modulus(cls, modulus: int) -> "IncrementerCircuit":
        """Incrementer wide enough to count up to ``modulus``."""
        return cls(_width_for_modulus(modulus))

    def increment(
        self, register: Register, generator: Optional[torch.Generator] = None
    ) -> Register:
        output = self.transform(register)
        return Measurer(output, generator=generator).most_probable_register_output()


class DecrementerCircuit(Circuit):
    """Subtracts one modulo ``2**n``; the inverse of :class:`IncrementerCircuit`."""

    def __init__(self, n_inputs: int) -> None:
        inverse = IncrementerCircuit(n_inputs).inverse()
        super().__init__(f"|Dec-{n_inputs}|", n_inputs)
        for time, entry in inverse.entries():
            self.append(entry.transformer, time, entry.indices)

    @classmethod
    def from_modulus(cls, modulus: int) -> "DecrementerCircuit":
        return cls(_width_for_modulus(modulus))

    def decrement(
        self, register: Register, generator: Optional[torch.Generator] = None
    ) -> Register:
        output = self.transform(register)
        return Measurer(output, generator=generator).most_probable_register_output()


class HalfAdderCircuit(Circuit):
    """``(a, b, 0) -> (a, a xor b, a and b)``."""

    def __init__(self) -> None:
        super().__init__("|Half2Adder|", 3)
        self.append(TOFFOLI(), 0, [0, 1, 2])
        self.append(CNOT(), 1, [0, 1])

    def add(
        self, first: Qubit, second: Qubit, generator: Optional[torch.Generator] = None
    ) -> Tuple[Qubit, Qubit]:
        """Returns ``(result, carry)``."""
        qubits = _measure_qubits(self, [first, second, Qubit.grounded()], generator)
        return qubits[1], qubits[2]


class HalfSubtractorCircuit(Circuit):
    """``(a, b, 0) -> (a, a xor b, (not a) and b)``."""

    def __init__(self) -> None:
        super().__init__("|Half2Sub|", 3)
        x = X()
        self.append(CNOT(), 0, [0, 1])
        self.append(x, 1, 0)
        self.append(TOFFOLI(), 2, [0, 1, 2])
        self.append(x, 3, 0)

    def subtract(
        self, first: Qubit, second: Qubit, generator: Optional[torch.Generator] = None
    ) -> Tuple[Qubit, Qubit]:
        """Returns ``(result, borrow)`` of ``first - second``."""
        qubits = _measure_qubits(self, [first, second, Qubit.grounded()], generator)
        return qubits[1], qubits[2]


class FullAdderCircuit(Circuit):
    """``(a, b, c, 0) -> (a, b, a xor b xor c, majority(a, b, c))``."""

    def __init__(self) -> None:
        super().__init__("|Full2Adder|", 4)
        toffoli = TOFFOLI()
        cnot = CNOT()
        self.extend(
            [
                (toffoli, 0, [1, 2, 3]),
                (cnot, 1, [1, 2]),
                (toffoli, 2, [0, 2, 3]),
                (cnot, 3, [0, 2]),
            ]
        )

    def add(
        self,
        first: Qubit,
        second: Qubit,
        carry: Qubit,
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[Qubit, Qubit]:
        """Returns ``(result, carry)``."""
        qubits = _measure_qubits(self, [first, second, carry, Qubit.grounded()], generator)
        return qubits[2], qubits[3]


class FullSubtractorCircuit(Circuit):
    """Two chained half subtractors computing ``a - b - borrow``."""

    def __init__(self) -> None:
        super().__init__("|Full2Sub|", 4)
        half = HalfSubtractorCircuit()
        self.append(half, 0, [0, 1, 3])
        self.append(half, 1, [1, 2, 3])

    def subtract(
        self,
        first: Qubit,
        second: Qubit,
        borrow: Qubit,
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[Qubit, Qubit]:
        """Returns ``(result, borrow)``."""
        qubits = _measure_qubits(self, [first, second, borrow, Qubit.grounded()], generator)
        return qubits[2], qubits[3]


def _ripple_indices(bit: int, width: int) -> List[int]:
    """Indices of the full adder/subtractor handling ``bit`` of a ``width`` register."""
    carry_out = 2 * width + bit - 1 if bit > 0 else 3 * width
    return [bit, width + bit, 2 * width + bit, carry_out]


class _RippleCircuit(Circuit):
    def __init__(self, label: str, width: int, cell: Circuit) -> None:
        if width < 1:
            raise ValueError(f"Register width must be >= 1, got {width}.")
        super().__init__(f"|{label}-{width}|", 3 * width + 1)
        self.width = width
        for time, bit in enumerate(range(width - 1, -1, -1)):
            self.append(cell, time, _ripple_indices(bit, width))

    def _run(
        self,
        first: Register,
        second: Register,
        carry_in: Qubit,
        generator: Optional[torch.Generator],
    ) -> Tuple[Register, Qubit]:
        if len(first) != self.width or len(second) != self.width:
            raise ValueError(
                f"{self.name} needs two registers of {self.width} qubits, "
                f"got {len(first)} and {len(second)}."
            )
        result_slots = [Qubit.grounded() for _ in range(self.width - 1)] + [carry_in]
        qubits = list(first) + list(second) + result_slots + [Qubit.grounded()]
        measured = _measure_qubits(self, qubits, generator)
        return Register(measured[2 * self.width:3 * self.width]), measured[-1]


class AdderCircuit(_RippleCircuit):
    """Ripple-carry adder of two ``n``-qubit registers."""

    def __init__(self, width: int) -> None:
        super().__init__("Adder", width, FullAdderCircuit())

    @classmethod
    def from_modulus(cls, modulus: int) -> "AdderCircuit":
        return cls(_width_for_modulus(modulus))

    def add(
        self,
        first: Register,
        second: Register,
        carry: Optional[Qubit] = None,
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[Register, Qubit]:
        """Returns ``(first + second + carry mod 2**n, carry out)``."""
        return self._run(first, second, Qubit.grounded() if carry is None else carry, generator)


class SubtractorCircuit(_RippleCircuit):
    """Ripple-borrow subtractor of two ``n``-qubit registers."""

    def __init__(self, width: int) -> None:
        super().__init__("Sub", width, FullSubtractorCircuit())

    @classmethod
    def from_modulus(cls, modulus: int) -> "SubtractorCircuit":
        return cls(_width_for_modulus(modulus))

    def subtract(
        self,
        first: Register,
        second: Register,
        borrow: Optional[Qubit] = None,
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[Register, Qubit]:
        """Returns ``(first - second - borrow mod 2**n, borrow out)``."""
        return self._run(first, second, Qubit.grounded() if borrow is None else borrow, generator)


def add_registers(left: Register, right: Register) -> Register:
    """``left + right`` modulo ``2**n`` for the wider width ``n``."""
    first, second = align_registers(left, right)
    result, _ = AdderCircuit(len(first)).add(Register(first), Register(second))
    return result


def subtract_registers(left: Register, right: Register) -> Register:
    """``left - right`` modulo ``2**n`` for the wider width ``n``."""
    first, second = align_registers(left, right)
    result, _ = SubtractorCircuit(len(first)).subtract(Register(first), Register(second))
    return result


__all__ = [
    "IncrementerCircuit",
    "DecrementerCircuit",
    "HalfAdderCircuit",
    "HalfSubtractorCircuit",
    "FullAdderCircuit",
    "FullSubtractorCircuit",
    "AdderCircuit",
    "SubtractorCircuit",
    "add_registers",
    "subtract_registers",
]
