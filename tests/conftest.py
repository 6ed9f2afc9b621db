"""Shared pytest fixtures for the depthsperite test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Make the src/ layout importable without an install
SRC_ROOT = Path(__file__).parent.parent / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from depthsperite.core.frames import DepthFrame  # noqa: E402
from depthsperite.core.session import SensorObserver  # noqa: E402


def make_frame(value=725.0, width=32, height=32):
    """Frame of one constant depth."""
    return DepthFrame.from_millimeters(np.full((height, width), value, dtype=np.float32))


def frame_with(values, width=32, height=32, fill=725.0):
    """Frame filled with `fill` except the given {flat_index: depth} samples."""
    depths = np.full(width * height, fill, dtype=np.float32)
    for index, value in values.items():
        depths[index] = value
    return DepthFrame.from_millimeters(depths, width, height)


class RecordingObserver(SensorObserver):
    def __init__(self):
        self.statuses = []
        self.depth_images = []
        self.color_images = []
        self.stats = []
        self.saved = []

    def status_change(self, status):
        self.statuses.append(status)

    def capture_depth(self, image):
        self.depth_images.append(image)

    def capture_image(self, image):
        self.color_images.append(image)

    def capture_stats(self, center_depth, depth_range):
        self.stats.append((center_depth, depth_range))

    def save_complete(self, path):
        self.saved.append(path)


class MemoryWriter:
    def __init__(self, error=None):
        self.canvases = []
        self.error = error

    def write(self, canvas):
        if self.error is not None:
            raise self.error
        self.canvases.append(canvas.copy())
        return f"memory://{len(self.canvases)}"


class RecordingProducer:
    def __init__(self):
        self.calls = []

    def configure_capture(self, for_capture):
        self.calls.append(for_capture)


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def writer():
    return MemoryWriter()


@pytest.fixture
def producer():
    return RecordingProducer()


@pytest.fixture
def color_image():
    return np.full((32, 32, 3), 10, dtype=np.uint8)
