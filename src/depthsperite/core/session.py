import logging
import threading

from depthsperite.core.codec import CALIBRATE_GAMMA, encode_depth
from depthsperite.core.composer import canvas_layout, compose_capture
from depthsperite.core.config import RESOLUTION_TIERS, CaptureTier
from depthsperite.core.depth_range import RangeTracker
from depthsperite.core.history import DepthHistory
from depthsperite.core.storage import PngWriter

logger = logging.getLogger(__name__)


class SensorObserver:
    """Receives capture events. Called synchronously on the frame thread."""

    def status_change(self, status):
        pass

    def capture_depth(self, image):
        pass

    def capture_image(self, image):
        pass

    def capture_stats(self, center_depth, depth_range):
        pass

    def save_complete(self, path):
        pass


class CaptureSession:
    """
    Frame-processing path between the sensor and the rest of the app.

    Every depth frame goes into the history and is encoded for preview. When
    a capture has been requested, the next synchronised colour frame is
    composed with the encoded depth and handed to the writer.
    """

    def __init__(self, observer=None, writer=None, depth_range=None, history=None,
                 tier=CaptureTier.SINGLE, calibrate_gamma=CALIBRATE_GAMMA, tiers=None, producer=None):
        self.observer = observer or SensorObserver()
        self.writer = writer or PngWriter()
        self.depth_range = depth_range or RangeTracker()
        self.history = history if history is not None else DepthHistory()
        self.tiers = tiers or dict(RESOLUTION_TIERS)
        self.calibrate_gamma = calibrate_gamma
        self.producer = producer
        self.capture_count = 0
        self._tier = CaptureTier.from_name(tier)
        # Set from the UI thread, read once per frame on the sensor thread
        self._capture_requested = threading.Event()
        self._high_res_requested = False

    @classmethod
    def from_config(cls, config, observer=None, writer=None, producer=None):
        depth_min, depth_max = config.depth_range
        return cls(
            observer=observer,
            writer=writer or PngWriter(config.output_dir),
            depth_range=RangeTracker(depth_min, depth_max),
            history=DepthHistory(config.history_size),
            tier=config.capture_tier,
            calibrate_gamma=config.calibrate_gamma,
            tiers=config.resolution_tiers,
            producer=producer,
        )

    @property
    def tier(self):
        return self._tier

    @tier.setter
    def tier(self, value):
        self._tier = CaptureTier.from_name(value)

    @property
    def capture_pending(self):
        return self._capture_requested.is_set()

    def request_capture(self):
        self._capture_requested.set()
        if self._tier is not CaptureTier.SINGLE and self.producer is not None:
            self._high_res_requested = True
            self.producer.configure_capture(True)

    def render_depth(self, frame, tier=None):
        tier = tier or self._tier
        self.history.push(frame)
        image = encode_depth(frame, self.history, self.depth_range, tier,
                             self.calibrate_gamma, self.tiers)
        self.observer.status_change(f"Showing Depth {frame.width}x{frame.height}")
        self.observer.capture_depth(image)
        self.observer.capture_stats(frame.center_depth(), self.depth_range.window())
        return image

    def on_depth_frame(self, frame):
        return self.render_depth(frame)

    def on_synchronized_frames(self, frame, color):
        # The UI may switch tiers mid-frame; encode and compose with one value
        tier = self._tier
        image = self.render_depth(frame, tier)
        self.observer.capture_image(color)
        if self._capture_requested.is_set():
            return self.save(image, color, tier)
        return None

    def save(self, depth_image, color, tier=None):
        tier = tier or self._tier
        canvas = compose_capture(color, depth_image, tier, self.tiers)
        try:
            path = self.writer.write(canvas)
        except OSError as e:
            logger.error("Capture failed: %s", e)
            self.observer.status_change(f"Capture failed: {e}")
            return None
        else:
            self.capture_count += 1
            width, _, split = canvas_layout(
                (color.shape[1], color.shape[0]),
                (depth_image.shape[1], depth_image.shape[0]),
                tier, self.tiers)
            logger.info("Captured %dx%d (%s tier) to %s", width, split, tier.value, path)
            self.observer.save_complete(path)
            self.observer.status_change(f"Captured image at {width}x{split}")
            return canvas
        finally:
            self._capture_requested.clear()
            if self._high_res_requested:
                self._high_res_requested = False
                self.producer.configure_capture(False)
