"""Pytest configuration and shared fixtures for qtimeline tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Global seeding so measurement tie-breaks are reproducible
- Restoration of process-wide settings touched by tests
"""

import os

import numpy as np
import pytest
import torch

from qtimeline.config import get_config, set_config
from qtimeline.diagnostics.debug_mode import is_debug_enabled, set_debug_enabled


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    Device is determined by default_device().

    Returns:
        A seeded torch.Generator instance.
    """
    from qtimeline.core.device import default_device

    device = default_device().as_torch_device()
    generator = torch.Generator(device=device)
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds(rng: np.random.Generator, torch_rng: torch.Generator) -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(_seed())


@pytest.fixture(scope="function", autouse=True)
def restore_global_settings():
    """Undo configuration and debug-mode changes made by a test."""
    config = get_config()
    debug = is_debug_enabled()
    yield
    set_config(config)
    set_debug_enabled(debug)
