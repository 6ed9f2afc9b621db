import cv2
import numpy as np

from depthsperite.core.config import RESOLUTION_TIERS, CaptureTier


def _to_rgba(image):
    image = np.asarray(image, dtype=np.uint8)
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    return image


def _draw(canvas, image, x, y, w, h):
    if w <= 0 or h <= 0:
        return
    if image.shape[1] != w or image.shape[0] != h:
        # Nearest neighbour keeps encoded depth pixels intact when scaling
        image = cv2.resize(image, (w, h), interpolation=cv2.INTER_NEAREST)
    canvas[y:y + h, x:x + w] = image


def canvas_layout(color_size, depth_size, tier=CaptureTier.SINGLE, tiers=None):
    """
    Returns (width, height, split_row) of the capture canvas; the colour image
    sits above split_row and the depth image fills the rest.

    Sizes are (width, height) tuples.
    """
    tiers = tiers or RESOLUTION_TIERS
    tier = CaptureTier.from_name(tier)
    cw, ch = color_size
    dw, dh = depth_size

    if tier is CaptureTier.SINGLE:
        split = max(ch, dh)
        return max(cw, dw), 2 * split, split

    tw, th = tiers[tier]
    if tier is CaptureTier.FULL:
        # Depth was already re-wrapped to the tier width, keep its own height
        return tw, th + dh, th
    return tw, 2 * th, th


def compose_capture(color, depth_image, tier=CaptureTier.SINGLE, tiers=None):
    """Stacks the colour image above the encoded depth image in one RGBA canvas."""
    color = _to_rgba(color)
    depth_image = _to_rgba(depth_image)
    ch, cw = color.shape[:2]
    dh, dw = depth_image.shape[:2]
    width, height, split = canvas_layout((cw, ch), (dw, dh), tier, tiers)

    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    _draw(canvas, color, 0, 0, min(cw, width), min(ch, split))
    _draw(canvas, depth_image, 0, split, width, height - split)
    return canvas


def split_capture(canvas, tier=CaptureTier.SINGLE, depth_shape=None, tiers=None):
    """
    Splits a composed capture back into (color, depth_image).

    With `depth_shape` (height, width) the depth half is scaled back to the
    sensor resolution. FULL-tier depth images are returned as stored since
    their rows were re-wrapped rather than scaled.
    """
    tiers = tiers or RESOLUTION_TIERS
    tier = CaptureTier.from_name(tier)
    canvas = np.asarray(canvas)

    if tier is CaptureTier.SINGLE:
        split = canvas.shape[0] // 2
    else:
        split = tiers[tier][1]
    if not 0 < split < canvas.shape[0]:
        raise ValueError(f"Canvas of height {canvas.shape[0]} does not match the {tier.value} tier")

    color = canvas[:split]
    depth_image = canvas[split:]
    if depth_shape is not None and tier is not CaptureTier.FULL:
        h, w = depth_shape
        if depth_image.shape[:2] != (h, w):
            depth_image = cv2.resize(depth_image, (w, h), interpolation=cv2.INTER_NEAREST)
    return color, depth_image
