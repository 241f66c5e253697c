import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import numpy as np
import pytest

from core.pipeline import FilterPipeline
from core.settings import Settings
from utils.convolution import convolve, local_mean
from utils.kernel import KernelError


def make_gradient_image(height: int = 48, width: int = 64) -> np.ndarray:
    rows = np.arange(height)[:, None] * 5
    cols = np.arange(width)[None, :] * 3
    image = (rows + cols) % 256
    image[height // 3, :] = 255
    image[:, width // 2] = 0
    return image.astype(np.uint8)


def test_pipeline_is_gaussian_then_local_mean() -> None:
    image = make_gradient_image()
    pipeline = FilterPipeline()
    expected = local_mean(convolve(image, pipeline.kernel), 5)
    np.testing.assert_array_equal(pipeline.process(image), expected)


def test_pipeline_changes_interior_and_preserves_border() -> None:
    image = make_gradient_image()
    out = FilterPipeline(kernel_size=5, sigma=1.5).process(image)
    assert out.shape == image.shape and out.dtype == np.uint8
    np.testing.assert_array_equal(out[:2, :], image[:2, :])
    np.testing.assert_array_equal(out[-2:, :], image[-2:, :])
    np.testing.assert_array_equal(out[:, :2], image[:, :2])
    np.testing.assert_array_equal(out[:, -2:], image[:, -2:])
    assert not np.array_equal(out[2:-2, 2:-2], image[2:-2, 2:-2])


def test_seven_by_seven_constant_scenario() -> None:
    image = np.full((7, 7), 128, dtype=np.uint8)
    np.testing.assert_array_equal(FilterPipeline().process(image), image)


def test_three_by_three_is_unchanged() -> None:
    image = np.arange(9, dtype=np.uint8).reshape(3, 3) * 20
    np.testing.assert_array_equal(FilterPipeline().process(image), image)


@pytest.mark.parametrize("kernel_size,sigma", [(3, 0.8), (5, 1.5), (7, 2.5)])
@pytest.mark.parametrize("workers", [2, 8])
def test_parallel_mode_matches_sequential(kernel_size: int, sigma: float, workers: int) -> None:
    rng = np.random.default_rng(kernel_size * 31 + workers)
    image = rng.integers(0, 256, size=(83, 61), dtype=np.uint8)
    sequential = FilterPipeline(kernel_size, sigma, workers=1).process(image)
    parallel = FilterPipeline(kernel_size, sigma, workers=workers).process(image)
    np.testing.assert_array_equal(parallel, sequential)


def test_kernel_built_once_and_reused() -> None:
    pipeline = FilterPipeline()
    kernel = pipeline.kernel
    pipeline.process(make_gradient_image())
    pipeline.process(make_gradient_image(20, 20))
    assert pipeline.kernel is kernel


def test_invalid_parameters_fail_at_construction() -> None:
    with pytest.raises(KernelError):
        FilterPipeline(kernel_size=4)
    with pytest.raises(KernelError):
        FilterPipeline(sigma=0)


def test_from_settings(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings_file.write_text('{"kernel_size": 3, "sigma": 0.9, "mode": "sequential", "workers": 6}', encoding="utf-8")
    pipeline = FilterPipeline.from_settings(Settings(str(settings_file)))
    assert pipeline.kernel_size == 3
    assert pipeline.sigma == pytest.approx(0.9)
    assert pipeline.workers == 1

    settings = Settings(str(settings_file))
    settings.update(mode="parallel", workers=4, sigma=None)
    pipeline = FilterPipeline.from_settings(settings)
    assert pipeline.workers == 4
    assert pipeline.sigma == pytest.approx(0.9)
