"""Command line interface for batch grayscale filtering."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from app.image_utils import format_seconds
from core.dataset import DatasetDriver
from core.manifest import ManifestError
from core.pipeline import FilterPipeline
from core.settings import Settings
from utils.kernel import KernelError


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Apply Gaussian smoothing and local-mean noise reduction to a manifest of grayscale images"
    )
    parser.add_argument("--manifest", required=True, help="COCO-style JSON file with an 'images' list")
    parser.add_argument("--input", required=True, help="Directory the manifest filenames are relative to")
    parser.add_argument(
        "--output",
        required=True,
        help="Directory to write filtered images into (lossless: names other than PNG/BMP/TIFF, such as .jpg, receive PNG data)",
    )
    parser.add_argument("--kernel-size", type=int, help="Neighborhood extent of both filters (odd, >= 3)")
    parser.add_argument("--sigma", type=float, help="Gaussian spread")
    parser.add_argument(
        "--workers",
        type=int,
        help="Row bands computed concurrently per filter pass (0 = all CPUs)",
    )
    parser.add_argument("--sequential", action="store_true", help="Run every filter pass on one thread")
    parser.add_argument("--settings", help="Optional JSON settings file")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("--verbose", action="store_true", help="Log per-image timing")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings(args.settings)
    settings.update(
        kernel_size=args.kernel_size,
        sigma=args.sigma,
        workers=args.workers,
        mode="sequential" if args.sequential else None,
    )
    return settings


class ProgressBar:
    """tqdm bar created on the first report, once the manifest total is known."""

    def __init__(self) -> None:
        self.bar: Optional[tqdm] = None

    def __call__(self, done: int, total: int) -> None:
        if self.bar is None:
            self.bar = tqdm(total=total, desc="Filtering images", unit="img")
        self.bar.update(done - self.bar.n)

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    settings = load_settings(args)
    try:
        pipeline = FilterPipeline.from_settings(settings)
    except (KernelError, ValueError) as exc:
        raise SystemExit(f"Invalid filter configuration: {exc}")

    input_dir = Path(args.input).expanduser()
    output_dir = Path(args.output).expanduser()
    if not input_dir.is_dir():
        raise SystemExit(f"Input directory does not exist: {input_dir}")

    logging.info(
        "Kernel %dx%d, sigma=%.3f, %d worker(s)",
        pipeline.kernel_size,
        pipeline.kernel_size,
        pipeline.sigma,
        pipeline.workers,
    )

    progress = None if args.no_progress else ProgressBar()
    driver = DatasetDriver(pipeline, progress_callback=progress)
    try:
        with logging_redirect_tqdm():
            result = driver.run(str(Path(args.manifest).expanduser()), str(input_dir), str(output_dir))
    except ManifestError as exc:
        raise SystemExit(str(exc))
    except OSError as exc:
        raise SystemExit(f"Error creating output directory {output_dir}: {exc}")
    finally:
        if progress is not None:
            progress.close()

    logging.info(
        "Attempted %d/%d entries: processed=%d, skipped=%d, failed=%d, workers=%d",
        result.attempted,
        result.total,
        result.processed,
        result.skipped,
        result.failed,
        result.workers,
    )
    if not result.complete:
        logging.warning("Only %d of %d manifest entries were attempted", result.attempted, result.total)
    logging.info("Processing time: %.3f seconds (%s)", result.elapsed, format_seconds(result.elapsed))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
