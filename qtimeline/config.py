"""Process-wide numerical settings for the simulator."""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator, Optional


@dataclass(frozen=True)
class SimulationConfig:
    """
    Numerical settings shared by the matrix, measurement and circuit layers.

    Args:
        rel_tol: Relative tolerance of the shared approximate equality.
        abs_tol: Absolute tolerance, used when comparing against zero.
        snap_tol: Distance to 0 or 1 below which measured probabilities are
            snapped to the exact value.
        sparse_fill_ratio: Maximum fraction of explicit cells for an operand
            to take the sparse multiplication path.
        max_workers: Thread count for sparse row fan-out. None lets
            ``concurrent.futures`` choose.
        max_qubits: Largest register a circuit may be built for; state
            vectors and lifted operators grow as 2**n.
    """

    rel_tol: float = 1e-9
    abs_tol: float = 1e-12
    snap_tol: float = 1e-12
    sparse_fill_ratio: float = 0.1
    max_workers: Optional[int] = None
    max_qubits: int = 16

    @classmethod
    def from_env(cls) -> "SimulationConfig":
        """Build a config, overriding defaults from ``QTIMELINE_*`` variables."""
        base = cls()
        workers = os.getenv("QTIMELINE_MAX_WORKERS")
        return cls(
            rel_tol=float(os.getenv("QTIMELINE_REL_TOL", base.rel_tol)),
            abs_tol=float(os.getenv("QTIMELINE_ABS_TOL", base.abs_tol)),
            snap_tol=base.snap_tol,
            sparse_fill_ratio=base.sparse_fill_ratio,
            max_workers=int(workers) if workers else None,
            max_qubits=int(os.getenv("QTIMELINE_MAX_QUBITS", base.max_qubits)),
        )


_config: SimulationConfig = SimulationConfig.from_env()


def get_config() -> SimulationConfig:
    """Return the active configuration."""
    return _config


def set_config(config: SimulationConfig) -> None:
    """Replace the active configuration."""
    if config.sparse_fill_ratio < 0.0 or config.sparse_fill_ratio > 1.0:
        raise ValueError(
            f"sparse_fill_ratio must lie in [0, 1], got {config.sparse_fill_ratio}."
        )
    if config.max_qubits < 1:
        raise ValueError(f"max_qubits must be >= 1, got {config.max_qubits}.")

    global _config
    _config = config


@contextmanager
def config_context(**overrides) -> Iterator[SimulationConfig]:
    """
    Temporarily override fields of the active configuration.

    Example
    -------
    >>> with config_context(sparse_fill_ratio=1.0):
    ...     pass
    """
    previous = _config
    set_config(replace(previous, **overrides))
    try:
        yield _config
    finally:
        set_config(previous)


__all__ = ["SimulationConfig", "get_config", "set_config", "config_context"]
