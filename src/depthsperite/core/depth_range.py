ABSOLUTE_MIN = 450.0   # Closest depth the sensor resolves reliably (mm)
ABSOLUTE_MAX = 1000.0  # Furthest depth rendered at full resolution (mm)


class RangeTracker:
    """
    The valid-depth window [min, max] in millimetres.

    Both ends only move through relative deltas and are re-clamped on every
    call so that ABSOLUTE_MIN <= min <= max <= ABSOLUTE_MAX always holds.
    """

    def __init__(self, depth_min=ABSOLUTE_MIN, depth_max=ABSOLUTE_MAX):
        self._min = ABSOLUTE_MIN
        self._max = ABSOLUTE_MAX
        # Start from the full window and move in, so any starting pair is clamped
        self.adjust_max(float(depth_max) - self._max)
        self.adjust_min(float(depth_min) - self._min)

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    def window(self):
        return self._min, self._max

    def adjust_min(self, delta):
        self._min = max(ABSOLUTE_MIN, min(self._max, self._min + delta))
        return self._min

    def adjust_max(self, delta):
        self._max = min(ABSOLUTE_MAX, max(self._min, self._max + delta))
        return self._max

    def __repr__(self):
        return f"RangeTracker(min={self._min:.1f}, max={self._max:.1f})"
