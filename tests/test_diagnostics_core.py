"""Tests for core diagnostic functions."""

import math

import pytest
import torch

from qtimeline.diagnostics import (
    assert_normalized,
    assert_unitary,
    bloch_sphere_coordinates,
    bloch_vector,
    is_unitary,
    state_norm,
    truth_table,
)
from qtimeline.gates import standard
from qtimeline.state import Qubit


def test_state_norm_and_assert_normalized() -> None:
    """Test state_norm and assert_normalized on normalized states."""
    state = torch.tensor([1.0, 0.0], dtype=torch.complex128)
    n = state_norm(state)
    assert n.shape == ()
    assert torch.allclose(n, torch.tensor(1.0, dtype=torch.float64))

    # Should not raise
    assert_normalized(state, atol=1e-6)


def test_assert_normalized_raises_for_non_unit_state() -> None:
    """Test that assert_normalized raises for non-normalized states."""
    state = torch.tensor([2.0, 0.0], dtype=torch.complex128)
    with pytest.raises(ValueError, match="not normalized"):
        assert_normalized(state, atol=1e-6)


def test_assert_normalized_non_finite() -> None:
    """Test that assert_normalized raises on non-finite norms."""
    state = torch.tensor([float("inf"), 0.0], dtype=torch.complex128)
    with pytest.raises(ValueError, match="not finite"):
        assert_normalized(state)


def test_is_unitary_and_assert() -> None:
    """Library gates are unitary; the setters are not."""
    assert is_unitary(standard.H().matrix.to_tensor())
    assert is_unitary(standard.QFT(3).matrix.to_tensor())
    assert_unitary(standard.MAGIC().matrix.to_tensor())

    setter = standard.setter(0).matrix.to_tensor()
    assert not is_unitary(setter)
    with pytest.raises(ValueError, match="not unitary"):
        assert_unitary(setter)


def test_is_unitary_rejects_non_square() -> None:
    """Non-square matrices are never unitary."""
    assert not is_unitary(torch.zeros(2, 3, dtype=torch.complex128))


def test_bloch_vector_basic_states() -> None:
    """Test bloch_vector on standard single-qubit states."""
    sqrt2 = math.sqrt(2.0)
    states = torch.tensor(
        [[1.0, 0.0], [0.0, 1.0], [1.0 / sqrt2, 1.0 / sqrt2], [1.0 / sqrt2, 1j / sqrt2]],
        dtype=torch.complex128,
    )
    vectors = bloch_vector(states)
    assert vectors.shape == (4, 3)
    expected = torch.tensor(
        [[0.0, 0.0, 1.0], [0.0, 0.0, -1.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
        dtype=torch.float64,
    )
    assert torch.allclose(vectors, expected, atol=1e-12)


def test_bloch_vector_wrong_dimension() -> None:
    """Test that bloch_vector raises on non-single-qubit states."""
    state = torch.tensor([1.0, 0.0, 0.0, 0.0], dtype=torch.complex128)
    with pytest.raises(ValueError, match="last dimension 2"):
        bloch_vector(state)


@pytest.mark.parametrize(
    "qubit, point",
    [
        (Qubit.grounded(), (0.0, 0.0, 1.0)),
        (Qubit.excited(), (0.0, 0.0, -1.0)),
        (Qubit.superposed(), (1.0, 0.0, 0.0)),
        (Qubit(1 / math.sqrt(2), -1j / math.sqrt(2)), (0.0, -1.0, 0.0)),
    ],
)
def test_bloch_sphere_coordinates(qubit: Qubit, point) -> None:
    """Qubits map to the expected points on the sphere."""
    assert bloch_sphere_coordinates(qubit) == pytest.approx(point, abs=1e-12)


def test_bloch_sphere_ignores_global_phase() -> None:
    """Multiplying both amplitudes by a phase leaves the point unchanged."""
    phase = complex(math.cos(0.7), math.sin(0.7))
    rotated = Qubit(0.6 * phase, 0.8j * phase)
    assert bloch_sphere_coordinates(rotated) == pytest.approx(
        bloch_sphere_coordinates(Qubit(0.6, 0.8j)), abs=1e-12
    )


def test_truth_table_of_cnot() -> None:
    """CNOT flips the target exactly when the control is set."""
    table = truth_table(standard.CNOT())
    assert table == {
        "00": {"00": 1.0},
        "01": {"01": 1.0},
        "10": {"11": 1.0},
        "11": {"10": 1.0},
    }


def test_truth_table_of_hadamard() -> None:
    """Superposing gates spread each row over several outputs."""
    table = truth_table(standard.H())
    assert table["0"] == {"0": pytest.approx(0.5), "1": pytest.approx(0.5)}
