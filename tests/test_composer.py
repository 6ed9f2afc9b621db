import numpy as np
import pytest

from depthsperite.core.composer import canvas_layout, compose_capture, split_capture
from depthsperite.core.config import CaptureTier


def random_rgba(shape, seed=0):
    return np.random.default_rng(seed).integers(0, 256, size=shape + (4,), dtype=np.uint8)


def test_single_tier_stacks_color_over_depth():
    color = np.full((48, 64, 3), 10, dtype=np.uint8)
    depth = random_rgba((48, 64))
    canvas = compose_capture(color, depth)

    assert canvas.shape == (96, 64, 4)
    assert (canvas[:48, :, :3] == 10).all()
    assert (canvas[:48, :, 3] == 255).all()
    assert (canvas[48:] == depth).all()


def test_single_tier_uses_larger_of_the_two_images():
    color = np.full((10, 20, 3), 200, dtype=np.uint8)
    depth = random_rgba((40, 50))
    assert canvas_layout((20, 10), (50, 40)) == (50, 80, 40)

    canvas = compose_capture(color, depth)
    assert canvas.shape == (80, 50, 4)
    assert (canvas[:10, :20, :3] == 200).all()
    # unused area stays transparent black
    assert (canvas[10:40] == 0).all()
    assert (canvas[40:] == depth).all()


def test_scaled_tier_round_trip():
    tiers = {CaptureTier.DOUBLE: (64, 48)}
    color = np.full((48, 64, 3), 77, dtype=np.uint8)
    depth = random_rgba((24, 32), seed=1)

    canvas = compose_capture(color, depth, CaptureTier.DOUBLE, tiers)
    assert canvas.shape == (96, 64, 4)
    # nearest neighbour doubling
    assert (canvas[48:50, 0:2] == depth[0, 0]).all()

    top, bottom = split_capture(canvas, CaptureTier.DOUBLE, depth_shape=(24, 32), tiers=tiers)
    assert (top[..., :3] == 77).all()
    assert (bottom == depth).all()


def test_oversized_color_is_fitted_to_tier():
    tiers = {CaptureTier.QUAD: (40, 30)}
    color = np.full((60, 80, 3), 5, dtype=np.uint8)
    canvas = compose_capture(color, random_rgba((15, 20)), "quad", tiers)
    assert canvas.shape == (60, 40, 4)
    assert (canvas[:30, :, :3] == 5).all()


def test_full_tier_keeps_depth_height():
    tiers = {CaptureTier.FULL: (100, 80)}
    color = np.full((80, 100, 3), 3, dtype=np.uint8)
    depth = random_rgba((11, 100), seed=2)

    canvas = compose_capture(color, depth, CaptureTier.FULL, tiers)
    assert canvas.shape == (91, 100, 4)

    _, bottom = split_capture(canvas, CaptureTier.FULL, depth_shape=(32, 32), tiers=tiers)
    assert (bottom == depth).all()


def test_split_rejects_canvas_from_another_tier():
    canvas = np.zeros((96, 64, 4), dtype=np.uint8)
    with pytest.raises(ValueError):
        split_capture(canvas, CaptureTier.FULL, tiers={CaptureTier.FULL: (100, 200)})
