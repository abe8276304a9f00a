"""Device utilities for CPU/CUDA/MPS support."""

import torch

from .integrators import PhaseState


def get_device(preference: str = "auto") -> torch.device:
    """Get the best available device.

    Args:
        preference: "auto", "cpu", "cuda", or "mps"

    Returns:
        torch.device for computation
    """
    if preference == "cpu":
        return torch.device("cpu")
    if preference == "cuda":
        if torch.cuda.is_available():
            return torch.device("cuda")
        raise RuntimeError("CUDA requested but not available")
    if preference == "mps":
        if torch.backends.mps.is_available():
            return torch.device("mps")
        raise RuntimeError("MPS requested but not available")
    if preference != "auto":
        raise ValueError(f"Unknown device preference: {preference!r}")

    if torch.cuda.is_available():
        return torch.device("cuda")
    if torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


def to_device(x, device: torch.device | str | None = None):
    """Move a tensor, module or PhaseState to device."""
    if device is None:
        device = get_device()
    if isinstance(device, str):
        device = torch.device(device)
    if isinstance(x, PhaseState):
        return PhaseState(theta=x.theta.to(device), r=x.r.to(device))
    return x.to(device)


def available_devices(dtype: torch.dtype | None = None) -> list[str]:
    """Return available device names able to hold tensors of ``dtype``.

    MPS has no float64 support, so it is left out when float64 is asked for.
    """
    devices = ["cpu"]
    if torch.cuda.is_available():
        devices.append("cuda")
    if torch.backends.mps.is_available() and dtype != torch.float64:
        devices.append("mps")
    return devices
