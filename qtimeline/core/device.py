"""Device abstraction for dense amplitude storage."""

from __future__ import annotations

import torch


class Device:
    """
    A logical device: the torch device and dtypes used for dense matrices.

    Instances are treated as immutable once constructed.
    """

    def __init__(
        self,
        name: str,
        torch_device: torch.device,
        dtype: torch.dtype = torch.float64,
        complex_dtype: torch.dtype = torch.complex128,
    ) -> None:
        """
        Initialize a Device.

        Args:
            name: Logical device name ("cpu" or "cuda").
            torch_device: Underlying PyTorch device.
            dtype: Real dtype for probabilities.
            complex_dtype: Complex dtype for amplitudes.
        """
        self.name = name
        self.torch_device = torch_device
        self.dtype = dtype
        self.complex_dtype = complex_dtype

    def __repr__(self) -> str:
        return (
            f"Device(name={self.name!r}, torch_device={self.torch_device}, "
            f"complex_dtype={self.complex_dtype})"
        )

    def as_torch_device(self) -> torch.device:
        """Return the underlying PyTorch device."""
        return self.torch_device


def device(name: str) -> Device:
    """
    Create a Device from its name.

    Args:
        name: "cpu", or "cuda" when CUDA is available.

    Raises:
        RuntimeError: If "cuda" is requested but CUDA is not available.
        ValueError: If the device name is not supported.
    """
    if name == "cpu":
        return Device(name="cpu", torch_device=torch.device("cpu"))
    if name == "cuda":
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA device requested but torch.cuda.is_available() is False"
            )
        return Device(name="cuda", torch_device=torch.device("cuda"))
    raise ValueError(
        f"Unsupported device name: {name!r}. Supported devices: ['cpu', 'cuda']"
    )


def default_device() -> Device:
    """Return the CPU device used for every dense matrix."""
    return device("cpu")


__all__ = ["Device", "device", "default_device"]
