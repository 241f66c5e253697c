import logging
import os
import threading
import time
from typing import Any, Callable, Iterable, Optional, Sequence

import numpy as np

from app.image_utils import load_gray, write_gray
from app.models import BatchResult, EntryFailure
from core.manifest import ManifestReader
from core.pipeline import FilterPipeline

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
Loader = Callable[[str], Optional[np.ndarray]]
Writer = Callable[[str, np.ndarray], bool]


class ProgressCounter:
    """Attempted-entry counter whose increment and report form one critical section."""

    def __init__(self, total: int, callback: ProgressCallback | None = None):
        self.total = total
        self.callback = callback
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            if self.callback:
                self.callback(self._value, self.total)
            return self._value


def resolve_entry_paths(file_name: str, input_dir: str, output_dir: str) -> tuple[str, str] | None:
    """
    Joins a manifest filename onto the input and output roots.

    Returns None when the name is absolute, climbs out of the roots with "..",
    or cannot be used as a filesystem path (NUL byte, unencodable characters).
    """
    if "\x00" in file_name:
        return None
    try:
        os.fsencode(file_name)
    except UnicodeError:
        return None
    rel = os.path.normpath(file_name)
    if os.path.isabs(rel) or rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return None
    return os.path.join(input_dir, rel), os.path.join(output_dir, rel)


class DatasetDriver:
    """Runs the filter pipeline over every manifest entry, one image at a time."""

    def __init__(
        self,
        pipeline: FilterPipeline,
        loader: Loader = load_gray,
        writer: Writer = write_gray,
        progress_callback: ProgressCallback | None = None,
    ):
        self.pipeline = pipeline
        self.loader = loader
        self.writer = writer
        self.progress_callback = progress_callback

    def run(self, manifest_path: str, input_dir: str, output_dir: str) -> BatchResult:
        """
        Processes the dataset described by ``manifest_path``.

        Raises:
            ManifestError: the manifest is unusable; nothing is processed.
            OSError: the output root cannot be created.
        """
        entries = ManifestReader.load(manifest_path)
        os.makedirs(output_dir, exist_ok=True)
        return self.process_entries(entries, input_dir, output_dir)

    def process_entries(self, entries: Sequence[Any] | Iterable[Any], input_dir: str, output_dir: str) -> BatchResult:
        entries = list(entries)
        result = BatchResult(total=len(entries), workers=self.pipeline.workers)
        counter = ProgressCounter(result.total, self.progress_callback)

        logger.info("Processing %d entries with %d worker(s)", result.total, self.pipeline.workers)
        start = time.perf_counter()
        for index, entry in enumerate(entries):
            reason = self._process_entry(entry, input_dir, output_dir)
            if reason is None:
                result.processed += 1
            else:
                name = ManifestReader.entry_file_name(entry)
                result.failures.append(EntryFailure(index, name, reason))
                if reason == "malformed_entry":
                    result.skipped += 1
                else:
                    result.failed += 1
            result.attempted = counter.increment()
        result.elapsed = time.perf_counter() - start
        return result

    def _process_entry(self, entry: Any, input_dir: str, output_dir: str) -> str | None:
        """Filters one entry; returns None on success or the reason it was not processed."""
        file_name = ManifestReader.entry_file_name(entry)
        if file_name is None:
            logger.warning("Skipping manifest entry without a usable file_name: %r", entry)
            return "malformed_entry"

        paths = resolve_entry_paths(file_name, input_dir, output_dir)
        if paths is None:
            logger.warning("Skipping entry outside the dataset directories: %s", file_name)
            return "unsafe_path"
        image_path, output_path = paths

        image = self.loader(image_path)
        if image is None:
            logger.warning("Could not read image: %s", image_path)
            return "unreadable_image"

        filtered = self.pipeline.process(image)

        if not self.writer(output_path, filtered):
            logger.warning("Could not write processed image: %s", output_path)
            return "write_failed"
        return None
