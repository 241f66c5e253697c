"""Sliding-window filters over single-channel ``uint8`` images.

Both filters share one sweep: interior rows are split into contiguous
bands, each band is computed from the untouched input buffer and written
to its own rows of a fresh output buffer, and the outer ``size // 2``
rows and columns are copied from the input unchanged.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple

import numpy as np

from .kernel import KernelError, validate_kernel_size

__all__ = [
    "convolve",
    "copy_border",
    "local_mean",
    "resolve_workers",
    "row_bands",
]

Band = Tuple[int, int]
BandFn = Callable[[int, int], None]


def resolve_workers(workers: int | None) -> int:
    """Return a concrete worker count; ``None`` or 0 means all CPUs."""
    if workers is None or workers == 0:
        return os.cpu_count() or 1
    workers = int(workers)
    if workers < 0:
        raise ValueError(f"Worker count must be >= 0, got {workers}")
    return workers


def row_bands(start: int, stop: int, workers: int) -> List[Band]:
    """Split ``[start, stop)`` into at most ``workers`` contiguous bands."""
    rows = stop - start
    if rows <= 0:
        return []
    count = max(1, min(workers, rows))
    base, extra = divmod(rows, count)
    bands = []
    lo = start
    for idx in range(count):
        hi = lo + base + (1 if idx < extra else 0)
        bands.append((lo, hi))
        lo = hi
    return bands


def copy_border(src: np.ndarray, dst: np.ndarray, offset: int) -> None:
    """Copy the outer ``offset`` rows and columns of ``src`` into ``dst``."""
    if offset <= 0:
        return
    h, w = src.shape
    dst[:offset, :] = src[:offset, :]
    dst[max(offset, h - offset):, :] = src[max(offset, h - offset):, :]
    dst[:, :offset] = src[:, :offset]
    dst[:, max(offset, w - offset):] = src[:, max(offset, w - offset):]


def _check_image(image: np.ndarray) -> np.ndarray:
    if not isinstance(image, np.ndarray):
        raise ValueError("Image must be a numpy array")
    if image.ndim != 2:
        raise ValueError(f"Expected a single-channel 2-D image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected uint8 samples, got {image.dtype}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("Image with zero dimension provided to filter")
    return image


def _sweep(image: np.ndarray, size: int, band_fn: BandFn, out: np.ndarray, workers: int) -> np.ndarray:
    h, w = image.shape
    offset = size // 2
    copy_border(image, out, offset)
    if h <= 2 * offset or w <= 2 * offset:
        return out

    bands = row_bands(offset, h - offset, resolve_workers(workers))
    if len(bands) == 1:
        band_fn(*bands[0])
        return out

    with ThreadPoolExecutor(max_workers=len(bands)) as executor:
        futures = [executor.submit(band_fn, lo, hi) for lo, hi in bands]
        for future in futures:
            future.result()
    return out


def convolve(image: np.ndarray, kernel: np.ndarray, workers: int | None = 1) -> np.ndarray:
    """Apply a weighted-sum filter, keeping border pixels unchanged.

    Parameters
    ----------
    image:
        Single-channel ``uint8`` image. It is never modified.
    kernel:
        Square odd-sized weight matrix, typically from
        :func:`utils.kernel.gaussian_kernel`.
    workers:
        Number of row bands computed concurrently. ``1`` runs on the
        calling thread; ``None`` uses every available CPU. The result is
        identical for every value.

    Returns
    -------
    numpy.ndarray
        New ``uint8`` image with the same shape as ``image``.
    """
    image = _check_image(image)
    kernel = np.asarray(kernel, dtype=np.float64)
    if kernel.ndim != 2 or kernel.shape[0] != kernel.shape[1]:
        raise KernelError(f"Kernel must be square, got shape {kernel.shape}")
    size = validate_kernel_size(kernel.shape[0])
    offset = size // 2
    h, w = image.shape
    inner_w = w - 2 * offset

    src = image.astype(np.float64)
    out = np.empty_like(image)

    def band(lo: int, hi: int) -> None:
        acc = np.zeros((hi - lo, inner_w), dtype=np.float64)
        for k in range(size):
            rows = src[lo + k - offset:hi + k - offset]
            for l in range(size):
                acc += kernel[k, l] * rows[:, l:l + inner_w]
        np.rint(acc, out=acc)
        np.clip(acc, 0, 255, out=acc)
        out[lo:hi, offset:w - offset] = acc.astype(np.uint8)

    return _sweep(image, size, band, out, workers)


def local_mean(image: np.ndarray, size: int = 5, workers: int | None = 1) -> np.ndarray:
    """Replace each interior pixel by the truncated mean of its window."""
    image = _check_image(image)
    size = validate_kernel_size(size)
    offset = size // 2
    area = size * size
    h, w = image.shape
    inner_w = w - 2 * offset

    src = image.astype(np.int32)
    out = np.empty_like(image)

    def band(lo: int, hi: int) -> None:
        acc = np.zeros((hi - lo, inner_w), dtype=np.int32)
        for k in range(size):
            rows = src[lo + k - offset:hi + k - offset]
            for l in range(size):
                acc += rows[:, l:l + inner_w]
        out[lo:hi, offset:w - offset] = (acc // area).astype(np.uint8)

    return _sweep(image, size, band, out, workers)
