"""Amplitude matrices, sparse storage and approximate equality."""

from .approx import approx_equal, approx_equal_tensors, approx_zero, snap_probability
from .matrix import (
    AmplitudeMatrix,
    adjoint,
    format_amplitude,
    matrix_power,
    multiply,
    tensor_product,
    transpose,
)
from .sparse import SparseArray

__all__ = [
    "approx_equal",
    "approx_zero",
    "approx_equal_tensors",
    "snap_probability",
    "AmplitudeMatrix",
    "SparseArray",
    "format_amplitude",
    "multiply",
    "transpose",
    "adjoint",
    "tensor_product",
    "matrix_power",
]
