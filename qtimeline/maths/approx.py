"""The shared approximate-equality predicate.

Every floating comparison in the package (probability snapping, gate and
circuit equality, convergence checks) goes through these helpers.
"""

from __future__ import annotations

import cmath
from typing import Optional

import torch

from qtimeline.config import get_config


def approx_equal(
    a: complex,
    b: complex,
    rel_tol: Optional[float] = None,
    abs_tol: Optional[float] = None,
) -> bool:
    """
    Return True when two scalars are equal within the configured tolerances.

    Parameters
    ----------
    a, b:
        Real or complex scalars.
    rel_tol, abs_tol:
        Overrides for the active :class:`SimulationConfig` tolerances.
    """
    cfg = get_config()
    return cmath.isclose(
        complex(a),
        complex(b),
        rel_tol=cfg.rel_tol if rel_tol is None else rel_tol,
        abs_tol=cfg.abs_tol if abs_tol is None else abs_tol,
    )


def approx_zero(a: complex, abs_tol: Optional[float] = None) -> bool:
    """Return True when ``|a|`` is within the absolute tolerance of zero."""
    return approx_equal(a, 0.0, abs_tol=abs_tol)


def approx_equal_tensors(
    a: torch.Tensor,
    b: torch.Tensor,
    rel_tol: Optional[float] = None,
    abs_tol: Optional[float] = None,
) -> bool:
    """Element-wise :func:`approx_equal` over two tensors of the same shape."""
    if a.shape != b.shape:
        return False

    cfg = get_config()
    rtol = cfg.rel_tol if rel_tol is None else rel_tol
    atol = cfg.abs_tol if abs_tol is None else abs_tol

    diff = (a - b).abs()
    scale = torch.maximum(a.abs(), b.abs())
    bound = torch.clamp(scale * rtol, min=atol)
    return bool(torch.all(diff <= bound))


def snap_probability(p: float, tol: Optional[float] = None) -> float:
    """Snap a probability within ``tol`` of 0 or 1 to the exact value."""
    if tol is None:
        tol = get_config().snap_tol
    if p >= 1.0 - tol:
        return 1.0
    if p <= tol:
        return 0.0
    return p


__all__ = ["approx_equal", "approx_zero", "approx_equal_tensors", "snap_probability"]
