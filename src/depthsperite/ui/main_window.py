import logging

import numpy as np
from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (QComboBox, QHBoxLayout, QLabel, QMainWindow,
                               QPushButton, QVBoxLayout, QWidget)

from depthsperite.core.config import CaptureTier
from depthsperite.core.kinect import KinectWorker
from depthsperite.core.session import CaptureSession, SensorObserver

logger = logging.getLogger(__name__)

MM_TO_M = 0.001


class ObserverBridge(QObject, SensorObserver):
    """Re-emits session events as Qt signals so the window updates on the GUI thread."""
    status_changed = Signal(str)
    depth_ready = Signal(object)
    image_ready = Signal(object)
    stats_ready = Signal(object, object)
    saved = Signal(str)

    def status_change(self, status):
        self.status_changed.emit(status)

    def capture_depth(self, image):
        self.depth_ready.emit(image)

    def capture_image(self, image):
        self.image_ready.emit(image)

    def capture_stats(self, center_depth, depth_range):
        self.stats_ready.emit(center_depth, depth_range)

    def save_complete(self, path):
        self.saved.emit(str(path))


def to_pixmap(image, target_size):
    h, w = image.shape[:2]
    image = np.ascontiguousarray(image)
    if image.shape[2] == 4:
        # Alpha carries codec flags, not transparency, so preview it as RGBX
        q_img = QImage(image.data, w, h, 4 * w, QImage.Format_RGBX8888)
    else:
        q_img = QImage(image.data, w, h, 3 * w, QImage.Format_RGB888)
    return QPixmap.fromImage(q_img.copy()).scaled(target_size, Qt.KeepAspectRatio, Qt.FastTransformation)


def format_stats(center_depth, depth_range):
    lo, hi = depth_range
    center = "--" if center_depth is None else f"{round(center_depth) * MM_TO_M:.3f}"
    return f"{center} m [{round(lo) * MM_TO_M:.3f}, {round(hi) * MM_TO_M:.3f}]"


class CaptureMainWindow(QMainWindow):
    def __init__(self, config):
        super().__init__()
        self.setWindowTitle("Depthsperite")
        self.resize(1300, 600)
        self.setStyleSheet("""
        QMainWindow { background-color: #000000; }
        QLabel { color: #eee; }
        QPushButton {
            background-color: #2c2c2c;
            border: 1px solid #444;
            color: #eee;
            padding: 8px;
        }
    """)
        self.config = config
        self.bridge = ObserverBridge()
        self.session = CaptureSession.from_config(config, observer=self.bridge)
        self.step = config.range_step

        # --- UI SETUP ---
        self.color_label = QLabel("Waiting for sensor...")
        self.color_label.setAlignment(Qt.AlignCenter)
        self.depth_label = QLabel("Initializing Depth Stream...")
        self.depth_label.setAlignment(Qt.AlignCenter)
        views = QHBoxLayout()
        views.addWidget(self.color_label, 1)
        views.addWidget(self.depth_label, 1)

        self.status_label = QLabel("")
        self.status_history = QLabel("")
        self.status_history.setWordWrap(True)
        self.status_history.hide()
        self.history_btn = QPushButton("Status History")
        self.history_btn.setCheckable(True)
        self.history_btn.toggled.connect(self.status_history.setVisible)

        self.stats_label = QLabel("")
        self.count_label = QLabel("Captures: 0")

        self.tier_combo = QComboBox()
        self.tier_combo.addItems([t.value for t in CaptureTier])
        self.tier_combo.setCurrentText(self.session.tier.value)
        self.tier_combo.currentTextChanged.connect(self.set_tier)

        self.capture_btn = QPushButton("Capture")
        self.capture_btn.clicked.connect(self.session.request_capture)

        controls = QHBoxLayout()
        for text, end, sign in (("Near -", "min", -1), ("Near +", "min", 1),
                                ("Far -", "max", -1), ("Far +", "max", 1)):
            btn = QPushButton(text)
            btn.clicked.connect(lambda _=False, e=end, s=sign: self.nudge_range(e, s))
            controls.addWidget(btn)
        controls.addWidget(self.tier_combo)
        controls.addWidget(self.capture_btn)
        controls.addWidget(self.history_btn)

        info = QHBoxLayout()
        info.addWidget(self.status_label, 1)
        info.addWidget(self.stats_label)
        info.addWidget(self.count_label)

        layout = QVBoxLayout()
        layout.addLayout(views, 1)
        layout.addLayout(info)
        layout.addWidget(self.status_history)
        layout.addLayout(controls)
        container = QWidget()
        container.setLayout(layout)
        self.setCentralWidget(container)

        self.bridge.status_changed.connect(self.update_status)
        self.bridge.depth_ready.connect(self.update_depth)
        self.bridge.image_ready.connect(self.update_color)
        self.bridge.stats_ready.connect(self.update_stats)
        self.bridge.saved.connect(self.capture_saved)

        self.worker = KinectWorker(self.session)
        self.session.producer = self.worker
        self.worker.start()

    def nudge_range(self, end, sign):
        tracker = self.session.depth_range
        if end == "min":
            tracker.adjust_min(sign * self.step)
        else:
            tracker.adjust_max(sign * self.step)

    def set_tier(self, name):
        self.session.tier = name
        logger.info("Capture tier set to %s", name)

    @Slot(str)
    def update_status(self, status):
        if self.status_label.text() != status:
            self.status_label.setText(status)
            history = self.status_history.text()
            self.status_history.setText(f"{history}\n{status}" if history else status)

    @Slot(object)
    def update_depth(self, image):
        self.depth_label.setPixmap(to_pixmap(image, self.depth_label.size()))

    @Slot(object)
    def update_color(self, image):
        self.color_label.setPixmap(to_pixmap(image, self.color_label.size()))

    @Slot(object, object)
    def update_stats(self, center_depth, depth_range):
        self.stats_label.setText(format_stats(center_depth, depth_range))

    @Slot(str)
    def capture_saved(self, path):
        self.count_label.setText(f"Captures: {self.session.capture_count}")

    def closeEvent(self, event):
        self.worker.stop()
        self.config.save(depth_range=self.session.depth_range.window(),
                         capture_res=self.session.tier)
        super().closeEvent(event)
