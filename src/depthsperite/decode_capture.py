"""Offline decoder: recovers the depth map from a saved capture PNG."""
import argparse
import logging
import os
import sys

import numpy as np

from depthsperite.core.codec import DepthDecodeError, PixelKind, decode_depth
from depthsperite.core.composer import split_capture
from depthsperite.core.config import CaptureTier
from depthsperite.core.storage import load_capture

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Decode the depth half of a capture image.")
    parser.add_argument("capture", help="PNG written by the capture app")
    parser.add_argument("--tier", default=CaptureTier.SINGLE.value,
                        choices=[t.value for t in CaptureTier],
                        help="capture resolution tier the image was saved with")
    parser.add_argument("--width", type=int, default=640, help="depth sensor width")
    parser.add_argument("--height", type=int, default=480, help="depth sensor height")
    parser.add_argument("-o", "--output", help="output .npy path (default: next to the capture)")
    return parser


def decode_file(path, tier=CaptureTier.SINGLE, depth_shape=(480, 640)):
    canvas = load_capture(path)
    _, depth_image = split_capture(canvas, tier, depth_shape)
    return decode_depth(depth_image, shape=depth_shape)


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s | %(message)s")
    args = build_parser().parse_args(argv)
    shape = (args.height, args.width)
    try:
        decoded = decode_file(args.capture, CaptureTier.from_name(args.tier), shape)
    except (OSError, DepthDecodeError) as e:
        logger.error("%s", e)
        return 1

    output = args.output or os.path.splitext(args.capture)[0] + "_depth.npy"
    np.save(output, decoded.depths.astype(np.float32))

    kinds = decoded.kinds
    logger.info("Range %.0f-%.0f mm, calibration row: %s",
                decoded.depth_min, decoded.depth_max, "yes" if decoded.calibrated else "no")
    logger.info("In range %d, near %d, far %d, unknown %d",
                np.count_nonzero(kinds == PixelKind.IN_RANGE), np.count_nonzero(kinds == PixelKind.NEAR),
                np.count_nonzero(kinds == PixelKind.FAR), np.count_nonzero(kinds == PixelKind.UNKNOWN))
    logger.info("Depth map saved to %s", output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
