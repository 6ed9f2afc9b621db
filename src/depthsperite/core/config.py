import json
import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)

CONFIG_FILE = "assets/config/depthsperite.json"


class CaptureTier(Enum):
    SINGLE = "single"
    DOUBLE = "double"
    QUAD = "quad"
    FULL = "full"

    @classmethod
    def from_name(cls, name):
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown capture tier: {name!r}") from None


# Canvas sizes (width, height) per tier. FULL is the colour camera's maximum.
RESOLUTION_TIERS = {
    CaptureTier.SINGLE: (640, 480),
    CaptureTier.DOUBLE: (1280, 960),
    CaptureTier.QUAD: (2560, 1920),
    CaptureTier.FULL: (2592, 1936),
}


class ConfigManager:
    def __init__(self, path=CONFIG_FILE):
        self.path = path
        self.default_config = {
            "depth_range": [450, 1000],
            "capture_res": CaptureTier.SINGLE.value,
            "calibrate_gamma": True,
            "history_size": 10,
            "range_step": 10,
            "output_dir": "captures",
            "resolution_tiers": {t.value: list(size) for t, size in RESOLUTION_TIERS.items()},
        }
        self.data = self.load()

    def load(self):
        data = dict(self.default_config)
        if not os.path.exists(self.path):
            return data
        try:
            with open(self.path, 'r') as f:
                d = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s, using defaults: %s", self.path, e)
            return data
        if not isinstance(d, dict):
            logger.warning("Ignoring %s: expected a JSON object", self.path)
            return data

        # Tier overrides are merged so a partial table keeps the other sizes
        tiers = dict(data["resolution_tiers"])
        tiers.update(d.pop("resolution_tiers", None) or {})
        data.update(d)
        data["resolution_tiers"] = tiers
        return data

    def save(self, depth_range=None, capture_res=None):
        if depth_range is not None:
            self.data["depth_range"] = [float(v) for v in depth_range]
        if capture_res is not None:
            self.data["capture_res"] = CaptureTier.from_name(capture_res).value

        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self.data, f, indent=4)
        logger.info("Configuration saved to %s", self.path)

    @property
    def depth_range(self):
        lo, hi = self.data["depth_range"]
        return float(lo), float(hi)

    @property
    def capture_tier(self):
        return CaptureTier.from_name(self.data["capture_res"])

    @property
    def calibrate_gamma(self):
        return bool(self.data["calibrate_gamma"])

    @property
    def history_size(self):
        return int(self.data["history_size"])

    @property
    def range_step(self):
        return float(self.data["range_step"])

    @property
    def output_dir(self):
        return self.data["output_dir"]

    @property
    def resolution_tiers(self):
        """Tier -> (width, height) table with any configured overrides applied."""
        tiers = {}
        for name, size in self.data["resolution_tiers"].items():
            w, h = size
            tiers[CaptureTier.from_name(name)] = (int(w), int(h))
        return tiers
