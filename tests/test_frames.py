import numpy as np
import pytest

from depthsperite.core.frames import DepthFrame
from depthsperite.core.kinect import frame_from_registered


def test_only_nan_marks_a_missing_sample():
    frame = DepthFrame.from_millimeters([[np.nan, 0.0], [np.inf, 512.0]])
    assert frame.valid.tolist() == [[False, True], [True, True]]
    assert frame.sample(0) is None
    assert frame.sample(1) == 0.0
    assert frame.sample(2) == np.inf
    assert frame.sample(3) == 512.0


def test_registered_zero_becomes_missing():
    frame = frame_from_registered(np.array([[0, 700], [1200, 0]], dtype=np.uint16))
    assert frame.valid.tolist() == [[False, True], [True, False]]
    assert frame.sample(1) == 700.0


def test_flat_data_needs_dimensions():
    with pytest.raises(ValueError):
        DepthFrame.from_millimeters([1.0, 2.0, 3.0, 4.0])
    with pytest.raises(ValueError):
        DepthFrame.from_millimeters([1.0, 2.0, 3.0], width=2, height=2)

    frame = DepthFrame.from_millimeters([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], width=3, height=2)
    assert (frame.width, frame.height) == (3, 2)
    assert frame.sample(4) == 5.0


def test_center_depth():
    depths = np.arange(1, 13, dtype=np.float32).reshape(3, 4)
    frame = DepthFrame.from_millimeters(depths)
    # (3 * (4 + 1)) // 2 = 7
    assert frame.center_depth() == 8.0

    single = DepthFrame.from_millimeters([[700.0]])
    assert single.center_depth() == 700.0
