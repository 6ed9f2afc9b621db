import logging

import numpy as np
from PySide6.QtCore import QThread

from depthsperite.core.frames import DepthFrame

logger = logging.getLogger(__name__)


def load_freenect():
    try:
        import freenect
    except ImportError:
        raise ImportError('Kinect v1 dependencies are not installed, '
                          'install depthsperite[kinect] and libfreenect') from None
    return freenect


def frame_from_registered(depth):
    """DepthFrame from a DEPTH_REGISTERED buffer, where 0 means no reading."""
    depth = depth.astype(np.float32)
    depth[depth == 0] = np.nan
    return DepthFrame.from_millimeters(depth)


class KinectWorker(QThread):
    """
    Polls a Kinect for registered depth (mm) plus colour and feeds every pair
    into a CaptureSession. Runs on its own thread; the session's observer is
    called from here.
    """
    def __init__(self, session, index=0):
        super().__init__()
        self.freenect = load_freenect()
        self.session = session
        self.index = index
        self.running = True
        self.connected = False

    def configure_capture(self, for_capture):
        # libfreenect's sync API only streams 640x480 colour
        if for_capture:
            logger.debug("High resolution colour requested, Kinect v1 stays at 640x480")

    def _set_connected(self, connected):
        if connected != self.connected:
            self.connected = connected
            self.session.observer.status_change("Streaming" if connected else "Disconnected")

    def run(self):
        fn = self.freenect
        while self.running:
            try:
                # Registered depth is metric and aligned to the colour camera
                depth = fn.sync_get_depth(index=self.index, format=fn.DEPTH_REGISTERED)
                color = fn.sync_get_video(index=self.index)
                if depth is None or color is None:
                    self._set_connected(False)
                    self.msleep(500)
                    continue
                self._set_connected(True)

                frame = frame_from_registered(depth[0])
                self.session.on_synchronized_frames(frame, np.ascontiguousarray(color[0]))

            except Exception:
                logger.exception("Kinect sync error")
                self.msleep(500)

        self.freenect.sync_stop()

    def stop(self):
        self.running = False
        self.wait()
