import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import numpy as np
import pytest

from utils.kernel import KernelError, gaussian_kernel, kernel_offset


@pytest.mark.parametrize("size,sigma", [(3, 0.5), (5, 1.5), (7, 3.0), (9, 0.1), (11, 25.0)])
def test_kernel_is_normalized_and_non_negative(size: int, sigma: float) -> None:
    kernel = gaussian_kernel(size, sigma)
    assert kernel.shape == (size, size)
    assert kernel.dtype == np.float64
    assert abs(kernel.sum() - 1.0) < 1e-9
    assert np.all(kernel >= 0)


def test_default_kernel_matches_closed_form() -> None:
    kernel = gaussian_kernel()
    raw = np.array(
        [[np.exp(-((i - 2) ** 2 + (j - 2) ** 2) / (2 * 1.5 ** 2)) for j in range(5)] for i in range(5)]
    )
    np.testing.assert_allclose(kernel, raw / raw.sum(), rtol=0, atol=1e-15)
    # peak at the centre, symmetric in both axes
    assert kernel.argmax() == 12
    np.testing.assert_array_equal(kernel, kernel.T)
    np.testing.assert_array_equal(kernel, kernel[::-1, ::-1])


def test_kernel_is_read_only() -> None:
    kernel = gaussian_kernel()
    with pytest.raises(ValueError):
        kernel[0, 0] = 1.0


@pytest.mark.parametrize("size", [4, 2, 1, 0, -3, 5.0, True])
def test_invalid_size_rejected(size) -> None:
    with pytest.raises(KernelError):
        gaussian_kernel(size, 1.5)


@pytest.mark.parametrize("sigma", [0.0, -1.0, float("nan"), float("inf"), "wide"])
def test_invalid_sigma_rejected(sigma) -> None:
    with pytest.raises(KernelError):
        gaussian_kernel(5, sigma)


def test_kernel_error_is_value_error() -> None:
    assert issubclass(KernelError, ValueError)


def test_kernel_offset() -> None:
    assert kernel_offset(3) == 1
    assert kernel_offset(5) == 2
    assert kernel_offset(9) == 4
