from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class DepthFrame:
    """
    One depth frame in millimetres, row-major.

    `depths` is a float32 (height, width) array and `valid` a boolean array of
    the same shape; pixels with valid == False carry no measurement and their
    depth value is meaningless.
    """
    depths: np.ndarray
    valid: np.ndarray

    def __post_init__(self):
        if self.depths.ndim != 2:
            raise ValueError(f"Depth frame must be 2D, got shape {self.depths.shape}")
        if self.depths.shape != self.valid.shape:
            raise ValueError("Depth and validity arrays differ in shape")
        if self.depths.size == 0:
            raise ValueError("Depth frame is empty")

    @classmethod
    def from_millimeters(cls, depth, width=None, height=None):
        """
        Builds a frame from raw sensor output.

        `depth` may be a 2D array or a flat sequence (then width and height are
        required). NaN marks a missing sample; every other value, including 0
        and infinities, is a measurement.
        """
        depths = np.asarray(depth, dtype=np.float32)
        if depths.ndim == 1:
            if width is None or height is None:
                raise ValueError("width and height are required for flat depth data")
            if depths.size != width * height:
                raise ValueError(f"Expected {width * height} samples, got {depths.size}")
            depths = depths.reshape(height, width)
        valid = ~np.isnan(depths)
        depths = np.where(valid, depths, 0).astype(np.float32)
        return cls(depths, valid)

    @property
    def width(self):
        return self.depths.shape[1]

    @property
    def height(self):
        return self.depths.shape[0]

    @property
    def shape(self):
        return self.depths.shape

    @property
    def pixel_count(self):
        return self.depths.size

    def masked(self):
        """Flat masked array with missing samples masked out."""
        return np.ma.masked_array(self.depths.ravel(), mask=~self.valid.ravel())

    def sample(self, index):
        """Depth at flat pixel `index`, or None when there is no measurement."""
        row, col = divmod(int(index), self.width)
        if not self.valid[row, col]:
            return None
        return float(self.depths[row, col])

    def center_depth(self):
        # Just past mid-frame, on the centre row
        index = (self.height * (self.width + 1)) // 2
        return self.sample(min(index, self.pixel_count - 1))
