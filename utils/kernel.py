"""Gaussian kernel construction."""

from __future__ import annotations

import numpy as np

__all__ = ["KernelError", "gaussian_kernel", "kernel_offset", "validate_kernel_size"]

DEFAULT_KERNEL_SIZE = 5
DEFAULT_SIGMA = 1.5


class KernelError(ValueError):
    """Raised when kernel parameters cannot produce a valid kernel."""


def validate_kernel_size(size: int) -> int:
    """Return ``size`` if it is an odd integer of at least 3."""
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise KernelError(f"Kernel size must be an integer, got {size!r}")
    size = int(size)
    if size < 3 or size % 2 == 0:
        raise KernelError(f"Kernel size must be odd and >= 3, got {size}")
    return size


def kernel_offset(size: int) -> int:
    """Distance from the window centre to its edge."""
    return validate_kernel_size(size) // 2


def gaussian_kernel(size: int = DEFAULT_KERNEL_SIZE, sigma: float = DEFAULT_SIGMA) -> np.ndarray:
    """Build a normalized ``size`` x ``size`` Gaussian kernel.

    Parameters
    ----------
    size:
        Neighborhood extent. Must be odd and at least 3.
    sigma:
        Gaussian spread. Must be strictly positive.

    Returns
    -------
    numpy.ndarray
        Read-only ``float64`` matrix whose entries sum to 1.
    """
    size = validate_kernel_size(size)
    try:
        sigma = float(sigma)
    except (TypeError, ValueError) as exc:
        raise KernelError(f"Sigma must be a number, got {sigma!r}") from exc
    if not np.isfinite(sigma) or sigma <= 0.0:
        raise KernelError(f"Sigma must be positive, got {sigma}")

    center = size // 2
    ax = np.arange(size, dtype=np.float64) - center
    yy, xx = np.meshgrid(ax, ax, indexing="ij")
    kernel = np.exp(-(xx * xx + yy * yy) / (2.0 * sigma * sigma))
    kernel /= kernel.sum()
    kernel.setflags(write=False)
    return kernel
