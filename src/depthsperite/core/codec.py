"""
Depth <-> RGBA codec.

A depth frame is stored as an ordinary 8-bit RGBA image so it survives being
saved as a PNG next to the colour photo. Layout, in row-major pixel order:

    pixel 0        (0, 255, 255, 255)   range header follows
    pixel 1        base-100 span        round(max) - round(min)
    pixel 2        base-100 floor       round(min)
    [calibration]  (255, 0, 255, 255), black up to the frame width, then a
                   256 step greyscale ramp 0..255
    remaining      one pixel per depth sample:
                     unknown   (63, 0, 0, 0)
                     near      (0, g, 0, 0)    value below the window
                     far       (0, 0, b, 0)    value beyond the window
                     in range  (d, d, d, 255)  brighter is nearer

The header radix and the far-distance cap are part of the byte layout and
must not change.
"""
import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from depthsperite.core.config import RESOLUTION_TIERS, CaptureTier
from depthsperite.core.depth_range import ABSOLUTE_MAX, ABSOLUTE_MIN, RangeTracker
from depthsperite.core.frames import DepthFrame

CHANNELS = 4
BYTE_MAX = 255
CHANNEL_RANGE = 100          # header radix
MAX_ENCODED_VALUE = CHANNEL_RANGE ** 3
FAR_DISTANCE_CAP = 5000.0    # mm beyond max mapped onto the far-range blues
RAMP_LENGTH = 256
CALIBRATE_GAMMA = True

RANGE_SENTINEL = (0, 255, 255, 255)
CALIBRATION_SENTINEL = (255, 0, 255, 255)
CALIBRATION_PAD = (0, 0, 0, 255)
UNKNOWN_PIXEL = (63, 0, 0, 0)
PADDING_PIXEL = (255, 255, 255, 255)


class PixelKind(IntEnum):
    HEADER = 0
    UNKNOWN = 1
    NEAR = 2
    FAR = 3
    IN_RANGE = 4


class DepthDecodeError(ValueError):
    pass


def round_half_up(x):
    """Rounds halves away from zero for the non-negative values used here."""
    return np.floor(np.asarray(x, dtype=np.float64) + 0.5)


def to_byte(x):
    return np.clip(np.nan_to_num(np.floor(x), nan=0.0), 0, BYTE_MAX).astype(np.uint8)


def encode_value(value):
    """Base-100 little-endian pixel (low, mid, high, 255) for 0 <= value < 1,000,000."""
    value = int(value)
    if not 0 <= value < MAX_ENCODED_VALUE:
        raise ValueError(f"Header value {value} outside [0, {MAX_ENCODED_VALUE})")
    low = value % CHANNEL_RANGE
    value //= CHANNEL_RANGE
    mid = value % CHANNEL_RANGE
    value //= CHANNEL_RANGE
    high = value % CHANNEL_RANGE
    return (low, mid, high, BYTE_MAX)


def decode_value(pixel):
    r, g, b = (int(c) for c in pixel[:3])
    return r + CHANNEL_RANGE * g + CHANNEL_RANGE * CHANNEL_RANGE * b


def _window(depth_range):
    if isinstance(depth_range, RangeTracker):
        return depth_range.window()
    lo, hi = depth_range
    return float(lo), float(hi)


def header_length(width, calibrate_gamma=CALIBRATE_GAMMA):
    """Number of leading pixels taken by the header for a frame `width` wide."""
    if not calibrate_gamma:
        return 3
    return max(4, width) + RAMP_LENGTH


def encode_payload(average, count, depth_min, depth_max):
    """Encodes averaged depths (with their valid counts) into (n, 4) RGBA pixels."""
    average = np.asarray(average, dtype=np.float64)
    count = np.asarray(count)
    pixels = np.empty((average.size, CHANNELS), dtype=np.uint8)
    pixels[:] = PADDING_PIXEL

    unknown = count == 0
    values = np.where(unknown, 0.0, average)
    near = ~unknown & (values < depth_min)
    far = ~unknown & ~near & (values > depth_max)
    inside = ~unknown & ~near & ~far

    pixels[unknown] = UNKNOWN_PIXEL

    pixels[near] = 0
    if depth_min > 0:
        pixels[near, 1] = to_byte(1 + np.floor(127 * values[near] / depth_min))
    else:
        pixels[near, 1] = 1

    d = np.minimum(1.0, (values[far] - depth_max) / FAR_DISTANCE_CAP)
    pixels[far] = 0
    pixels[far, 2] = to_byte(1 + np.floor(127 * (1 - d)))

    depth_start = float(round_half_up(depth_min))
    span = float(round_half_up(depth_max)) - depth_start
    if span > 0:
        from_floor = np.maximum(0.0, values[inside] - depth_start)
        scaled = 1 - np.minimum(1.0, from_floor / span)
    else:
        scaled = np.ones(int(inside.sum()))
    grey = to_byte(round_half_up(BYTE_MAX * scaled))
    pixels[inside, 0] = grey
    pixels[inside, 1] = grey
    pixels[inside, 2] = grey
    return pixels


def encode_depth(frame, history=None, depth_range=(ABSOLUTE_MIN, ABSOLUTE_MAX), tier=CaptureTier.SINGLE,
                 calibrate_gamma=CALIBRATE_GAMMA, tiers=None):
    """
    Encodes a depth frame into an RGBA image.

    Depth values come from the per-pixel mean over `history` when given,
    otherwise from `frame` alone. For the FULL tier the pixels are re-wrapped
    to the tier width, the tail of the last row left as white padding.

    Returns a (rows, width, 4) uint8 array.
    """
    tiers = tiers or RESOLUTION_TIERS
    tier = CaptureTier.from_name(tier)
    depth_min, depth_max = _window(depth_range)

    total = frame.pixel_count
    width, rows = frame.width, frame.height
    if tier is CaptureTier.FULL:
        width = tiers[CaptureTier.FULL][0]
        rows = int(math.ceil(total / width))

    offset = header_length(frame.width, calibrate_gamma)
    if offset > total:
        raise ValueError(f"{frame.width}x{frame.height} frame is too small for the depth header")

    image = np.empty((rows * width, CHANNELS), dtype=np.uint8)
    image[:] = PADDING_PIXEL

    depth_start = int(round_half_up(depth_min))
    span = int(round_half_up(depth_max)) - depth_start
    image[0] = RANGE_SENTINEL
    image[1] = encode_value(span)
    image[2] = encode_value(depth_start)

    if calibrate_gamma:
        image[3] = CALIBRATION_SENTINEL
        ramp_start = max(4, frame.width)
        image[4:ramp_start] = CALIBRATION_PAD
        ramp = np.arange(RAMP_LENGTH, dtype=np.uint8)
        image[ramp_start:offset, 0] = ramp
        image[ramp_start:offset, 1] = ramp
        image[ramp_start:offset, 2] = ramp
        image[ramp_start:offset, 3] = BYTE_MAX

    if history is None or len(history) == 0:
        average = frame.masked().filled(np.nan).astype(np.float64)
        count = frame.valid.ravel().astype(np.int64)
    else:
        if history.shape != frame.shape:
            raise ValueError(f"History shape {history.shape} does not match frame shape {frame.shape}")
        average, count = history.mean()

    image[offset:total] = encode_payload(average[offset:total], count[offset:total],
                                         depth_min, depth_max)
    return image.reshape(rows, width, CHANNELS)


@dataclass
class DecodedDepth:
    depth_min: float
    depth_max: float
    span: int
    calibrated: bool
    ramp: np.ndarray      # observed calibration ramp, None when absent
    depths: np.ndarray    # (height, width) mm, NaN where no value
    kinds: np.ndarray     # (height, width) PixelKind codes

    def to_frame(self):
        return DepthFrame.from_millimeters(self.depths)


def gamma_lut(ramp):
    """Lookup table mapping observed grey levels back onto the encoded ones."""
    observed = np.maximum.accumulate(np.asarray(ramp, dtype=np.float64))
    levels = np.arange(RAMP_LENGTH, dtype=np.float64)
    if np.array_equal(observed, levels):
        return None
    return np.interp(levels, observed, levels)


def decode_depth(image, shape=None):
    """
    Recovers depths from an encoded RGBA image.

    `shape` is the raw frame (height, width); it defaults to the image's own
    shape and must be given for FULL-tier images, whose rows were re-wrapped.
    Near and far pixels decode only approximately.
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != CHANNELS:
        raise DepthDecodeError(f"Expected an RGBA image, got shape {image.shape}")
    flat = image.reshape(-1, CHANNELS).astype(np.uint8)
    if tuple(int(c) for c in flat[0]) != RANGE_SENTINEL:
        raise DepthDecodeError("Image carries no depth range header")

    height, width = shape if shape is not None else image.shape[:2]
    total = height * width
    if total > flat.shape[0]:
        raise DepthDecodeError(f"{height}x{width} frame does not fit in image of {flat.shape[0]} pixels")

    span = decode_value(flat[1])
    depth_start = decode_value(flat[2])

    calibrated = tuple(int(c) for c in flat[3]) == CALIBRATION_SENTINEL
    ramp = None
    offset = 3
    if calibrated:
        offset = header_length(width, True)
        ramp = flat[offset - RAMP_LENGTH:offset, 0].copy()

    payload = flat[offset:total].astype(np.float64)
    r, g, b, a = payload[:, 0], payload[:, 1], payload[:, 2], payload[:, 3]
    transparent = a == 0
    near = transparent & (g > 0)
    far = transparent & ~near & (b > 0)
    inside = a == BYTE_MAX

    kinds = np.full(total, PixelKind.HEADER, dtype=np.int8)
    kinds[offset:] = PixelKind.UNKNOWN
    kinds[offset:][near] = PixelKind.NEAR
    kinds[offset:][far] = PixelKind.FAR
    kinds[offset:][inside] = PixelKind.IN_RANGE

    grey = r[inside]
    lut = gamma_lut(ramp) if ramp is not None else None
    if lut is not None:
        grey = lut[grey.astype(np.int64)]

    depths = np.full(total, np.nan, dtype=np.float64)
    values = depths[offset:]
    values[near] = (g[near] - 1) / 127 * depth_start
    values[far] = depth_start + span + (1 - (b[far] - 1) / 127) * FAR_DISTANCE_CAP
    values[inside] = depth_start + (1 - grey / BYTE_MAX) * span

    return DecodedDepth(
        depth_min=float(depth_start),
        depth_max=float(depth_start + span),
        span=span,
        calibrated=calibrated,
        ramp=ramp,
        depths=depths.reshape(height, width),
        kinds=kinds.reshape(height, width),
    )
