import logging
import os
from datetime import datetime

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class PngWriter:
    """Writes composed captures into a folder as timestamped PNG files."""

    def __init__(self, output_dir="captures", prefix="capture"):
        self.output_dir = output_dir
        self.prefix = prefix

    def next_path(self):
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return os.path.join(self.output_dir, f"{self.prefix}_{stamp}.png")

    def write(self, canvas):
        """Saves an RGBA canvas and returns the file path. Raises OSError on failure."""
        os.makedirs(self.output_dir, exist_ok=True)
        path = self.next_path()
        bgra = cv2.cvtColor(np.ascontiguousarray(canvas, dtype=np.uint8), cv2.COLOR_RGBA2BGRA)
        if not cv2.imwrite(path, bgra):
            raise OSError(f"Could not write capture to {path}")
        logger.info("Capture saved to %s", path)
        return path


def load_capture(path):
    """Reads a saved capture back as an RGBA array."""
    image = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise OSError(f"Could not read image {path}")
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
