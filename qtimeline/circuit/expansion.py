"""Lifting gate matrices that act on a few qubits to a whole register.

Qubit 0 is the most significant bit of a basis index, so qubit ``q`` of an
``n``-qubit register lives at bit position ``n - 1 - q``. The first index in
a target list is the most significant bit of the gate's own basis index.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import torch

from qtimeline.errors import DimensionMismatchError, IndexOutOfRangeError
from qtimeline.maths.matrix import AmplitudeMatrix


def _check_targets(n_qubits: int, gate_size: int, indices: Sequence[int]) -> None:
    if gate_size != 1 << len(indices):
        raise DimensionMismatchError(
            f"A {gate_size}x{gate_size} matrix cannot act on {len(indices)} qubits."
        )
    for q in indices:
        if q < 0 or q >= n_qubits:
            raise IndexOutOfRangeError(
                f"Qubit index {q} is out of range for a register of {n_qubits} qubits."
            )
    if len(set(indices)) != len(indices):
        raise IndexOutOfRangeError(f"Target indices {list(indices)} repeat a qubit.")


def lifting_indices(n_qubits: int, indices: Sequence[int]) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Per basis state, the reduced gate index and the bits outside the targets.

    Returns
    -------
    reduced:
        ``reduced[i]`` is the gate basis index formed by the targeted bits of
        ``i`` in the order of ``indices``.
    untouched:
        ``untouched[i]`` is ``i`` with every targeted bit cleared.
    """
    dim = 1 << n_qubits
    basis = torch.arange(dim, dtype=torch.long)
    reduced = torch.zeros(dim, dtype=torch.long)
    target_mask = 0
    for k, q in enumerate(reversed(indices)):
        position = n_qubits - 1 - q
        reduced |= ((basis >> position) & 1) << k
        target_mask |= 1 << position
    untouched = basis & ((dim - 1) ^ target_mask)
    return reduced, untouched


def expand_matrix(
    n_qubits: int, matrix: AmplitudeMatrix, indices: Sequence[int]
) -> AmplitudeMatrix:
    """
    Build the ``2**n x 2**n`` operator applying ``matrix`` to ``indices``.

    ``M[i, j] = G[i*, j*]`` when ``i`` and ``j`` agree on every untargeted
    bit (``i*``, ``j*`` being their reduced indices) and 0 otherwise, which is
    the identity on the remaining qubits tensored with ``G`` up to the qubit
    permutation.

    Raises
    ------
    DimensionMismatchError
        If the matrix size does not match the number of targets.
    IndexOutOfRangeError
        If a target is outside the register or repeated.
    """
    indices = list(indices)
    _check_targets(n_qubits, matrix.rows, indices)
    if indices == list(range(n_qubits)):
        return matrix.uncompressed()

    gate = matrix.to_tensor()
    reduced, untouched = lifting_indices(n_qubits, indices)
    connected = untouched[:, None] == untouched[None, :]
    lifted = gate[reduced[:, None], reduced[None, :]]
    lifted = torch.where(connected, lifted, torch.zeros((), dtype=lifted.dtype))
    return AmplitudeMatrix.from_tensor(lifted)


def apply_to_state(
    state: torch.Tensor,
    gate: torch.Tensor,
    indices: Sequence[int],
    n_qubits: int,
) -> torch.Tensor:
    """
    Apply a gate to the targeted qubits of a flat state without lifting it.

    The state is viewed as an ``n``-axis tensor with axis ``q`` for qubit
    ``q``; the targeted axes are moved to the front, contracted with the gate
    and moved back.
    """
    indices = list(indices)
    _check_targets(n_qubits, gate.shape[0], indices)
    k = len(indices)

    tensor = state.reshape([2] * n_qubits)
    moved = torch.movedim(tensor, indices, list(range(k)))
    rest_shape = moved.shape[k:]
    flat = moved.reshape(1 << k, -1)
    updated = (gate @ flat).reshape([2] * k + list(rest_shape))
    restored = torch.movedim(updated, list(range(k)), indices)
    return restored.reshape(-1)


__all__ = ["expand_matrix", "apply_to_state", "lifting_indices"]
