from collections import deque

import numpy as np

HISTORY_SIZE = 10


class DepthHistory:
    """
    Rolling window of the most recent depth frames.

    Structured-light sensors show per-frame shot noise and dropouts; averaging
    the last few frames per pixel, skipping missing samples, smooths both
    without much lag.
    """

    def __init__(self, capacity=HISTORY_SIZE):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        # deque evicts the oldest frame once maxlen is exceeded
        self.frame_buffer = deque(maxlen=capacity)
        self.shape = None

    def __len__(self):
        return len(self.frame_buffer)

    def push(self, frame):
        if self.shape is not None and frame.shape != self.shape:
            raise ValueError(f"Frame shape {frame.shape} does not match history shape {self.shape}")
        self.shape = frame.shape
        self.frame_buffer.append(frame.masked())

    def frames(self):
        """Held frames as flat masked arrays, oldest first."""
        return list(self.frame_buffer)

    def mean(self):
        """
        Per-pixel mean over the held frames, ignoring missing samples.

        Returns (average, count) as flat float64 / int arrays. Where count is
        0 the average is NaN.
        """
        if not self.frame_buffer:
            raise ValueError("History is empty")
        stack = np.ma.vstack(list(self.frame_buffer)).astype(np.float64)
        count = np.ma.count(stack, axis=0)
        average = np.ma.mean(stack, axis=0).filled(np.nan)
        return np.asarray(average, dtype=np.float64), np.asarray(count, dtype=np.int64)

    def mean_at(self, index):
        """(average, valid_count) at flat pixel `index`; average is NaN when count is 0."""
        total = 0.0
        count = 0
        for frame in self.frame_buffer:
            if np.ma.getmaskarray(frame)[index]:
                continue
            total += float(frame.data[index])
            count += 1
        if count == 0:
            return float("nan"), 0
        return total / count, count
