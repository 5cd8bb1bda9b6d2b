"""Tests for the gate library and derived-gate constructors."""

import cmath
import math

import numpy as np
import pytest

from qtimeline.errors import ArityMismatchError, DimensionMismatchError, InvalidShapeError
from qtimeline.gates import (
    Gate,
    GateKind,
    Transformer,
    adjoint_gate,
    compiled_gate,
    controlled_gate,
    double_controlled_gate,
    is_self_adjoint,
    multi_controlled_gate,
    powered_gate,
    qubit_count,
    universal_gate,
)
from qtimeline.gates import standard
from qtimeline.maths.matrix import AmplitudeMatrix
from qtimeline.state import Qubit, Register


def _np(gate: Gate) -> np.ndarray:
    return gate.matrix.to_tensor().numpy()


def test_standard_gates_are_unitary() -> None:
    """Every library gate except the setters is unitary."""
    gates = [
        standard.I(), standard.H(), standard.X(), standard.Y(), standard.Z(),
        standard.SQRT_NOT(), standard.SWAP(), standard.SQRT_SWAP(), standard.CNOT(),
        standard.CZ(), standard.TOFFOLI(), standard.FREDKIN(), standard.MAGIC(),
        standard.phase_shift(0.7), standard.phase(1.1), standard.RX(0.3),
        standard.RY(0.4), standard.RZ(0.5), standard.QFT(3),
        standard.kraus_cirac(0.1, 0.2, 0.3),
    ]
    for gate in gates:
        m = _np(gate)
        assert np.allclose(m.conj().T @ m, np.eye(m.shape[0])), gate.name
        assert isinstance(gate, Transformer)


def test_gate_names() -> None:
    """Names are bar-delimited and parameterized names carry two decimals."""
    assert standard.H().name == "|H|"
    assert standard.CNOT().name == "|C-NOT|"
    assert standard.TOFFOLI().name == "|CC-NOT|"
    assert standard.phase_shift(math.pi / 4).name == "|PhShift 0.79|"
    assert standard.RX(1.0).short_name == "Rx 1.00"
    assert standard.QFT(2, inverse=True).name == "|InvQuFT-2|"


def test_sqrt_not_squares_to_x() -> None:
    """√NOT applied twice is NOT."""
    assert powered_gate(standard.SQRT_NOT(), 2).matrix == standard.X().matrix
    assert powered_gate(standard.SQRT_SWAP(), 2).matrix == standard.SWAP().matrix


def test_hadamard_apply() -> None:
    """H maps |0⟩ to the equal superposition and back."""
    h = standard.H()
    superposed = h.apply(Qubit.grounded())
    assert superposed == Qubit.superposed()
    assert h.apply(superposed) == Qubit.grounded()


def test_setter_forces_bit() -> None:
    """The setters send both basis states to a fixed bit."""
    assert standard.setter(1).apply(Qubit.grounded()) == Qubit.excited()
    assert standard.setter(0).apply(Qubit.excited()) == Qubit.grounded()


def test_qft_matrix_entries() -> None:
    """QFT entries are ω^(jk)/√N."""
    n = 2
    size = 1 << n
    m = _np(standard.QFT(n))
    omega = cmath.exp(2j * math.pi / size)
    expected = np.array([[omega ** (j * k) for k in range(size)] for j in range(size)]) / 2
    assert np.allclose(m, expected)
    assert np.allclose(_np(standard.QFT(n, inverse=True)), expected.conj().T)


def test_qft_rejects_zero_qubits() -> None:
    """QFT needs at least one qubit."""
    with pytest.raises(ValueError, match="n_qubits >= 1"):
        standard.QFT(0)


def test_controlled_gate_embeds_lower_right() -> None:
    """Controlled gates act on the target only when the control is excited."""
    cz = controlled_gate(standard.Z())
    assert cz.name == "|C-Z|"
    assert cz.kind is GateKind.CONTROLLED
    assert np.allclose(_np(cz), np.diag([1, 1, 1, -1]))
    assert controlled_gate(standard.X()).matrix == standard.CNOT().matrix


def test_double_controlled_x_is_toffoli() -> None:
    """CC-X equals the Toffoli gate."""
    ccx = double_controlled_gate(standard.X())
    assert ccx.n_inputs == 3
    assert ccx.matrix == standard.TOFFOLI().matrix


def test_controlled_constructors_reject_wide_gates() -> None:
    """Only one-qubit gates can be controlled this way."""
    assert controlled_gate(standard.CNOT()) is None
    assert double_controlled_gate(standard.SWAP()) is None


def test_multi_controlled_gate() -> None:
    """One control per lower-right embedding; the target may be multi-qubit."""
    gate = multi_controlled_gate(2, standard.SWAP())
    assert gate.n_inputs == 4
    assert gate.name == "|C-C-Swap|"
    expected = np.eye(16, dtype=complex)
    expected[12:, 12:] = _np(standard.SWAP())
    assert np.allclose(_np(gate), expected)
    assert multi_controlled_gate(0, standard.X()) is None
    assert multi_controlled_gate(1, standard.X()).matrix == standard.CNOT().matrix


def test_powered_gate() -> None:
    """Powers repeat the gate and reject negative exponents."""
    s = powered_gate(standard.phase_shift(math.pi / 4), 2)
    assert s.kind is GateKind.POWERED
    assert s.matrix == standard.phase_shift(math.pi / 2).matrix
    assert powered_gate(standard.H(), 0).matrix == AmplitudeMatrix.identity(2)
    assert powered_gate(standard.H(), -1) is None


def test_compiled_gate_order() -> None:
    """The compiled matrix is gates[0] @ gates[1] @ ..."""
    gate = compiled_gate("XZ", [standard.X(), standard.Z()])
    assert gate.name == "|XZ|"
    assert np.allclose(_np(gate), _np(standard.X()) @ _np(standard.Z()))
    assert compiled_gate("empty", []) is None
    assert compiled_gate("mixed", [standard.X(), standard.CNOT()]) is None


def test_universal_gate_infers_arity() -> None:
    """Universal gates infer n_inputs from the matrix size."""
    gate = universal_gate(standard.CNOT().matrix, "|Mine|")
    assert gate.n_inputs == gate.n_outputs == 2
    assert gate.kind is GateKind.UNIVERSAL
    with pytest.raises(InvalidShapeError):
        universal_gate(AmplitudeMatrix(3, 3), "|Bad|")
    with pytest.raises(InvalidShapeError):
        universal_gate(standard.CNOT().matrix, "|Bad|", n_inputs=3)


def test_adjoint_gate() -> None:
    """Adjoints invert; self-adjoint gates come back unchanged."""
    h = standard.H()
    assert adjoint_gate(h) is h
    assert is_self_adjoint(standard.CNOT())

    s = standard.phase_shift(math.pi / 2)
    s_dagger = adjoint_gate(s)
    assert s_dagger.name == "|PhShift 1.57†|"
    product = s_dagger.matrix @ s.matrix
    assert product == AmplitudeMatrix.identity(2)


def test_gate_shape_validation() -> None:
    """Gate matrices must be 2**n square."""
    with pytest.raises(InvalidShapeError, match="needs a 4x4 matrix"):
        Gate(GateKind.UNIVERSAL, "|Bad|", AmplitudeMatrix.identity(2), 2, 2)
    with pytest.raises(InvalidShapeError):
        qubit_count(AmplitudeMatrix(2, 4))
    assert qubit_count(AmplitudeMatrix.identity(8)) == 3


def test_gate_equality() -> None:
    """Gates compare by name, arity and matrix."""
    assert standard.H() == standard.H()
    assert standard.H() != standard.X()
    renamed = universal_gate(standard.H().matrix, "|Had|")
    assert renamed != standard.H()


def test_transform_dimension_mismatch() -> None:
    """Inputs must hold 2**n_inputs amplitudes."""
    with pytest.raises(DimensionMismatchError, match="expects 4 amplitudes"):
        standard.CNOT().transform(Qubit.grounded())


def test_transform_accepts_row_vectors() -> None:
    """Row vectors are transposed before the product."""
    row = AmplitudeMatrix.from_rows([[0, 1]])
    assert standard.X().transform(row).flat() == [1, 0]


def test_apply_arity_mismatch() -> None:
    """apply needs exactly n_inputs qubits."""
    with pytest.raises(ArityMismatchError, match="takes 2 qubits, got 1"):
        standard.CNOT().apply(Qubit.excited())


def test_apply_multi_qubit_returns_vector() -> None:
    """CNOT on |1⟩|0⟩ gives the joint vector of |11⟩."""
    output = standard.CNOT().apply(Qubit.excited(), Qubit.grounded())
    assert isinstance(output, AmplitudeMatrix)
    assert output.flat() == [0, 0, 0, 1]


def test_apply_each() -> None:
    """apply_each maps a one-qubit gate over a register."""
    flipped = standard.X().apply_each(Register.from_bits("010"))
    assert flipped == Register.from_bits("101")
    with pytest.raises(ArityMismatchError):
        standard.SWAP().apply_each(Register.from_bits("01"))
