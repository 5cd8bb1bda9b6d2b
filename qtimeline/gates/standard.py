"""Standard gate library.

Each factory returns a fresh :class:`Gate`. Names double as the
circuit serializer's keys. Parameterized names carry the parameter rounded to
two decimals, so nearby parameters share a name; the serializer tells them
apart by matrix.
"""

from __future__ import annotations

import cmath
import math
from typing import Sequence

from qtimeline.gates.base import Gate, GateKind
from qtimeline.gates.derived import controlled_gate, double_controlled_gate
from qtimeline.maths.matrix import AmplitudeMatrix

_SQRT2_INV = 1.0 / math.sqrt(2.0)


def _primitive(name: str, grid: Sequence[Sequence[complex]]) -> Gate:
    matrix = AmplitudeMatrix.from_rows(grid)
    n_inputs = matrix.rows.bit_length() - 1
    return Gate(
        kind=GateKind.PRIMITIVE,
        name=name,
        matrix=matrix,
        n_inputs=n_inputs,
        n_outputs=n_inputs,
    )


def _parameterized(label: str, parameter: float, grid: Sequence[Sequence[complex]]) -> Gate:
    matrix = AmplitudeMatrix.from_rows(grid)
    n_inputs = matrix.rows.bit_length() - 1
    return Gate(
        kind=GateKind.PARAMETERIZED,
        name=f"|{label} {parameter:.2f}|",
        matrix=matrix,
        n_inputs=n_inputs,
        n_outputs=n_inputs,
        parameter=float(parameter),
    )


def I() -> Gate:
    """Single-qubit identity."""
    return _primitive("|I|", [[1, 0], [0, 1]])


def H() -> Gate:
    """
    Hadamard gate.

    Returns:
        ``|H|``, mapping ``|0⟩`` to ``(|0⟩ + |1⟩)/√2``.
    """
    return _primitive("|H|", [[_SQRT2_INV, _SQRT2_INV], [_SQRT2_INV, -_SQRT2_INV]])


def X() -> Gate:
    """Pauli-X (NOT) gate."""
    return _primitive("|X|", [[0, 1], [1, 0]])


def Y() -> Gate:
    """Pauli-Y gate."""
    return _primitive("|Y|", [[0, -1j], [1j, 0]])


def Z() -> Gate:
    """Pauli-Z (phase-flip) gate."""
    return _primitive("|Z|", [[1, 0], [0, -1]])


def SQRT_NOT() -> Gate:
    """Square root of NOT: applying it twice gives X."""
    a = 0.5 + 0.5j
    b = 0.5 - 0.5j
    return _primitive("|√NOT|", [[a, b], [b, a]])


def SWAP() -> Gate:
    """Exchange two qubits."""
    return _primitive(
        "|Swap|",
        [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]],
    )


def SQRT_SWAP() -> Gate:
    """Square root of SWAP."""
    a = 0.5 + 0.5j
    b = 0.5 - 0.5j
    return _primitive(
        "|√Swap|",
        [[1, 0, 0, 0], [0, a, b, 0], [0, b, a, 0], [0, 0, 0, 1]],
    )


def CNOT() -> Gate:
    """
    Controlled NOT.

    Returns:
        ``|C-NOT|`` with the control on the first index and the target on
        the second.
    """
    return _primitive(
        "|C-NOT|",
        [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]],
    )


def TOFFOLI() -> Gate:
    """Controlled-controlled NOT on (control, control, target)."""
    gate = double_controlled_gate(X())
    return Gate(
        kind=GateKind.PRIMITIVE,
        name="|CC-NOT|",
        matrix=gate.matrix,
        n_inputs=3,
        n_outputs=3,
    )


def FREDKIN() -> Gate:
    """Controlled SWAP on (control, target, target)."""
    matrix = AmplitudeMatrix.identity(8)
    matrix[5, 5] = 0
    matrix[6, 6] = 0
    matrix[5, 6] = 1
    matrix[6, 5] = 1
    return Gate(
        kind=GateKind.PRIMITIVE,
        name="|C-SWAP|",
        matrix=matrix,
        n_inputs=3,
        n_outputs=3,
    )


def MAGIC() -> Gate:
    """Change of basis to the magic (Bell-like) basis."""
    one = _SQRT2_INV
    i = 1j * _SQRT2_INV
    return _primitive(
        "|Magic|",
        [[one, 0, 0, i], [0, i, one, 0], [0, i, -one, 0], [one, 0, 0, -i]],
    )


def phase_shift(theta: float) -> Gate:
    """``diag(1, e^{iθ})``."""
    return _parameterized("PhShift", theta, [[1, 0], [0, cmath.exp(1j * theta)]])


def phase(theta: float) -> Gate:
    """Global phase ``e^{iθ} I``."""
    value = cmath.exp(1j * theta)
    return _parameterized("Ph", theta, [[value, 0], [0, value]])


def RX(theta: float) -> Gate:
    """
    Rotation about the X axis.

    Args:
        theta: Rotation angle in radians.

    Returns:
        ``[[cos(θ/2), -i sin(θ/2)], [-i sin(θ/2), cos(θ/2)]]``.
    """
    c = math.cos(theta / 2.0)
    s = math.sin(theta / 2.0)
    return _parameterized("Rx", theta, [[c, -1j * s], [-1j * s, c]])


def RY(theta: float) -> Gate:
    """Rotation about the Y axis."""
    c = math.cos(theta / 2.0)
    s = math.sin(theta / 2.0)
    return _parameterized("Ry", theta, [[c, -s], [s, c]])


def RZ(theta: float) -> Gate:
    """Rotation about the Z axis: ``diag(e^{-iθ/2}, e^{iθ/2})``."""
    return _parameterized(
        "Rz",
        theta,
        [[cmath.exp(-0.5j * theta), 0], [0, cmath.exp(0.5j * theta)]],
    )


def setter(bit: int) -> Gate:
    """
    Non-unitary gate forcing a qubit to ``|bit⟩``.

    Only meaningful on classical inputs; ``|0|`` maps both basis states to
    ``|0⟩``.
    """
    grid = [[1, 1], [0, 0]] if bit == 0 else [[0, 0], [1, 1]]
    return _primitive(f"|{1 if bit else 0}|", grid)


def QFT(n_qubits: int, inverse: bool = False) -> Gate:
    """
    Quantum Fourier transform on ``n_qubits``.

    Args:
        n_qubits: Number of qubits, at least 1.
        inverse: Build the inverse transform.

    Returns:
        ``|QuFT-n|`` with entries ``w^(ij)/√N``, ``w = e^{±2πi/N}``.
    """
    if n_qubits < 1:
        raise ValueError(f"QFT requires n_qubits >= 1, got {n_qubits}.")
    size = 1 << n_qubits
    sign = -1.0 if inverse else 1.0
    scale = 1.0 / math.sqrt(size)
    grid = [
        [cmath.exp(sign * 2j * math.pi * ((i * j) % size) / size) * scale for j in range(size)]
        for i in range(size)
    ]
    matrix = AmplitudeMatrix.from_rows(grid, compressed=False)
    return Gate(
        kind=GateKind.PRIMITIVE,
        name=f"|{'InvQuFT' if inverse else 'QuFT'}-{n_qubits}|",
        matrix=matrix,
        n_inputs=n_qubits,
        n_outputs=n_qubits,
    )


def kraus_cirac(alpha: float, beta: float, delta: float) -> Gate:
    """
    Two-qubit gate ``exp(i(α XX + β YY + δ ZZ))``, the non-local core of the
    Kraus-Cirac decomposition.
    """
    c_minus = math.cos(alpha - beta)
    s_minus = math.sin(alpha - beta)
    c_plus = math.cos(alpha + beta)
    s_plus = math.sin(alpha + beta)
    e_pos = cmath.exp(1j * delta)
    e_neg = cmath.exp(-1j * delta)
    grid = [
        [e_pos * c_minus, 0, 0, 1j * e_pos * s_minus],
        [0, e_neg * c_plus, 1j * e_neg * s_plus, 0],
        [0, 1j * e_neg * s_plus, e_neg * c_plus, 0],
        [1j * e_pos * s_minus, 0, 0, e_pos * c_minus],
    ]
    matrix = AmplitudeMatrix.from_rows(grid)
    return Gate(
        kind=GateKind.PARAMETERIZED,
        name=f"|KC {alpha:.2f} {beta:.2f} {delta:.2f}|",
        matrix=matrix,
        n_inputs=2,
        n_outputs=2,
    )


def CZ() -> Gate:
    """Controlled Z, ``|C-Z|``."""
    return controlled_gate(Z())


__all__ = [
    "I",
    "H",
    "X",
    "Y",
    "Z",
    "SQRT_NOT",
    "SWAP",
    "SQRT_SWAP",
    "CNOT",
    "CZ",
    "TOFFOLI",
    "FREDKIN",
    "MAGIC",
    "phase_shift",
    "phase",
    "RX",
    "RY",
    "RZ",
    "setter",
    "QFT",
    "kraus_cirac",
]
