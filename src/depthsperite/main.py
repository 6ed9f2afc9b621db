import logging
import sys

from PySide6.QtWidgets import QApplication

from depthsperite.core.config import ConfigManager
from depthsperite.ui.main_window import CaptureMainWindow

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s | %(message)s"


def main():
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    # 1. Initialize the Qt Application
    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    # 2. Main window starts the sensor thread itself
    window = CaptureMainWindow(ConfigManager())
    window.show()

    # 3. Execute the Application loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
