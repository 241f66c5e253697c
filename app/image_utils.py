import logging
import os

import cv2
import numpy as np

IMG_EXTS = {'.jpg','.jpeg','.png','.bmp','.tiff','.tif','.webp'}
# formats written as-is; everything else gets PNG bytes under its own name
LOSSLESS_EXTS = {'.png','.bmp','.tiff','.tif'}

logger = logging.getLogger(__name__)

def is_image_path(path: str) -> bool:
    ext = os.path.splitext(path)[1].lower()
    return ext in IMG_EXTS

def load_gray(path: str) -> np.ndarray | None:
    """Decode ``path`` as a single 8-bit channel, or return None."""
    try:
        # np.fromfile で日本語パス対応
        data = np.fromfile(path, dtype=np.uint8)
    except (OSError, ValueError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return None
    if data.size == 0:
        return None
    try:
        im = cv2.imdecode(data, cv2.IMREAD_GRAYSCALE)
    except cv2.error as e:
        logger.debug("Could not decode %s: %s", path, e)
        return None
    if im is None or im.ndim != 2 or im.size == 0:
        return None
    return im

def write_gray(path: str, image: np.ndarray) -> bool:
    """Write ``image`` losslessly to ``path``.

    PNG, BMP and TIFF names are encoded in their own format; any other name
    (including ``.jpg``) receives PNG bytes so the filtered samples survive
    exactly.
    """
    ext = os.path.splitext(path)[1].lower()
    if not is_image_path(path) or ext not in LOSSLESS_EXTS:
        ext = '.png'
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        ok, buf = cv2.imencode(ext, image)
        if not ok:
            return False
        buf.tofile(path)
        return True
    except (OSError, ValueError, cv2.error) as e:
        logger.debug("Could not write %s: %s", path, e)
        return False

def format_seconds(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.3f}s"
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}m{secs:06.3f}s"
