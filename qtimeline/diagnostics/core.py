"""Core diagnostic functions for amplitude vectors and gate matrices."""

from __future__ import annotations

import cmath
import math
from typing import Tuple

import numpy as np
import torch

from qtimeline.state.qubit import Qubit


def state_norm(state: torch.Tensor) -> torch.Tensor:
    """
    Compute the L2 norm of an amplitude tensor.

    Parameters
    ----------
    state:
        Complex tensor; every element is treated as one amplitude.

    Returns
    -------
    torch.Tensor
        Real scalar tensor.
    """
    flat = state.reshape(-1)
    return torch.sqrt((flat.conj() * flat).sum().real)


def assert_normalized(state: torch.Tensor, atol: float = 1e-8) -> None:
    """
    Assert that an amplitude vector has norm ~1.

    Raises
    ------
    ValueError
        If the norm is not finite or differs from 1 by more than ``atol``.
    """
    norm = state_norm(state)
    if not torch.isfinite(norm):
        raise ValueError("State norm is not finite.")
    if abs(float(norm) - 1.0) > atol:
        raise ValueError(
            f"State is not normalized within tolerance {atol}. Norm found: {float(norm)}"
        )


def is_unitary(matrix: torch.Tensor, atol: float = 1e-8) -> bool:
    """Check ``U^† U = I`` for a square matrix."""
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    product = matrix.conj().transpose(0, 1) @ matrix
    eye = torch.eye(matrix.shape[0], dtype=matrix.dtype, device=matrix.device)
    deviation = (product - eye).abs().max()
    if not torch.isfinite(deviation):
        return False
    return bool(deviation <= atol)


def assert_unitary(matrix: torch.Tensor, atol: float = 1e-8) -> None:
    """
    Raises
    ------
    ValueError
        If the matrix is not unitary within the tolerance.
    """
    if not is_unitary(matrix, atol=atol):
        raise ValueError(f"Matrix is not unitary within tolerance {atol}.")


def bloch_vector(state: torch.Tensor) -> torch.Tensor:
    """
    Bloch vector (x, y, z) of a single-qubit statevector ``[a, b]``.

        x = 2 Re(conj(a) b), y = 2 Im(conj(a) b), z = |a|^2 - |b|^2
    """
    if state.shape[-1] != 2:
        raise ValueError(
            "bloch_vector requires a single-qubit state with last dimension 2."
        )
    a = state[..., 0]
    b = state[..., 1]
    overlap = a.conj() * b
    x = 2.0 * overlap.real
    y = 2.0 * overlap.imag
    z = (a.abs() ** 2) - (b.abs() ** 2)
    return torch.stack([x, y, z], dim=-1)


def bloch_sphere_coordinates(qubit: Qubit) -> Tuple[float, float, float]:
    """
    Cartesian point of a qubit on the Bloch sphere.

    The qubit is written as ``cos(t/2)|0⟩ + e^{ip} sin(t/2)|1⟩`` after
    removing the global phase of the ground amplitude; the point is
    ``(sin t cos p, sin t sin p, cos t)``.
    """
    ground = qubit.ground_amplitude
    excited = qubit.excited_amplitude
    half_theta = math.acos(min(1.0, abs(ground)))
    if abs(ground) > 0.0:
        excited = excited * cmath.exp(-1j * cmath.phase(ground))

    if math.isclose(half_theta, 0.0, abs_tol=1e-12) or abs(excited) < 1e-12:
        phi = 0.0
    else:
        phi = cmath.phase(excited)

    theta = 2.0 * half_theta
    point = np.array(
        [np.sin(theta) * np.cos(phi), np.sin(theta) * np.sin(phi), np.cos(theta)]
    )
    return float(point[0]), float(point[1]), float(point[2])


__all__ = [
    "state_norm",
    "assert_normalized",
    "is_unitary",
    "assert_unitary",
    "bloch_vector",
    "bloch_sphere_coordinates",
]
