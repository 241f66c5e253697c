"""Kernel and sliding-window filter primitives."""
from .kernel import KernelError, gaussian_kernel, kernel_offset, validate_kernel_size
from .convolution import convolve, local_mean, resolve_workers, row_bands
__all__ = [
    "KernelError",
    "gaussian_kernel",
    "kernel_offset",
    "validate_kernel_size",
    "convolve",
    "local_mean",
    "resolve_workers",
    "row_bands",
]
