"""Tests for lifting gate matrices to whole registers."""

import itertools

import numpy as np
import pytest
import torch

from qtimeline.circuit import apply_to_state, expand_matrix, lifting_indices
from qtimeline.errors import DimensionMismatchError, IndexOutOfRangeError
from qtimeline.gates import standard
from qtimeline.maths.matrix import AmplitudeMatrix


def _reference_expansion(n_qubits: int, gate: np.ndarray, indices) -> np.ndarray:
    """Kronecker-product the gate onto the leading qubits, then permute axes."""
    k = len(indices)
    full = np.kron(gate, np.eye(1 << (n_qubits - k)))
    rest = [q for q in range(n_qubits) if q not in indices]
    order = list(indices) + rest
    tensor = full.reshape([2] * (2 * n_qubits))
    # Axis a of the kron layout is qubit order[a]; undo that for rows and columns.
    inverse = [order.index(q) for q in range(n_qubits)]
    tensor = tensor.transpose(inverse + [n_qubits + a for a in inverse])
    return tensor.reshape(1 << n_qubits, 1 << n_qubits)


def _random_unitary(rng: np.random.Generator, size: int) -> np.ndarray:
    a = rng.normal(size=(size, size)) + 1j * rng.normal(size=(size, size))
    q, _ = np.linalg.qr(a)
    return q


@pytest.mark.parametrize("n_qubits", [2, 3, 4, 5])
def test_expansion_matches_kronecker_reference(
    n_qubits: int, rng: np.random.Generator
) -> None:
    """Lifted matrices equal the explicit kron-and-permute construction."""
    for k in (1, 2):
        for indices in itertools.permutations(range(n_qubits), k):
            gate = _random_unitary(rng, 1 << k)
            lifted = expand_matrix(
                n_qubits, AmplitudeMatrix.from_tensor(torch.from_numpy(gate)), indices
            )
            expected = _reference_expansion(n_qubits, gate, indices)
            assert np.allclose(lifted.to_tensor().numpy(), expected)


def test_cnot_on_second_and_first_qubit() -> None:
    """CNOT with the control on qubit 1 flips qubit 0."""
    lifted = expand_matrix(2, standard.CNOT().matrix, [1, 0])
    expected = np.array(
        [[1, 0, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0], [0, 1, 0, 0]], dtype=complex
    )
    assert np.allclose(lifted.to_tensor().numpy(), expected)


def test_identity_placement_returns_gate() -> None:
    """Targets 0..n-1 in order return the gate matrix itself."""
    lifted = expand_matrix(2, standard.SWAP().matrix, [0, 1])
    assert lifted == standard.SWAP().matrix


def test_lifting_indices() -> None:
    """Reduced indices read the targeted bits in target order."""
    reduced, untouched = lifting_indices(3, [2, 0])
    # Basis 0b110: qubit 2 is 0, qubit 0 is 1 -> reduced 0b01.
    assert int(reduced[0b110]) == 0b01
    assert int(untouched[0b110]) == 0b010
    assert int(reduced[0b001]) == 0b10


def test_apply_to_state_matches_expansion(rng: np.random.Generator) -> None:
    """Applying in place equals multiplying by the lifted matrix."""
    n_qubits = 4
    state = rng.normal(size=16) + 1j * rng.normal(size=16)
    state = torch.from_numpy(state / np.linalg.norm(state))
    gate = torch.from_numpy(_random_unitary(rng, 4))
    for indices in ([0, 1], [3, 1], [2, 0]):
        lifted = expand_matrix(n_qubits, AmplitudeMatrix.from_tensor(gate), indices)
        expected = lifted.to_tensor() @ state
        actual = apply_to_state(state, gate, indices, n_qubits)
        assert torch.allclose(actual, expected)


def test_expansion_rejects_bad_targets() -> None:
    """Out-of-range, repeated or miscounted targets are rejected."""
    cnot = standard.CNOT().matrix
    with pytest.raises(IndexOutOfRangeError, match="out of range"):
        expand_matrix(2, cnot, [0, 2])
    with pytest.raises(IndexOutOfRangeError, match="repeat"):
        expand_matrix(3, cnot, [1, 1])
    with pytest.raises(DimensionMismatchError):
        expand_matrix(3, cnot, [0])
