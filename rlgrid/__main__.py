"""Main entry point for the RL Grid World viewer."""

import logging
import sys
from PySide6.QtWidgets import QApplication


def main():
    """Train and replay the agent in a Qt window."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setApplicationName("RL Grid World")
    app.setApplicationVersion("1.0.0")

    # Import UI components (after QApplication is created)
    from .ui.main_window import MainWindow
    from .app.controller import RLController

    controller = RLController()
    window = MainWindow(controller)

    try:
        window.show()
        return app.exec()
    finally:
        controller.cleanup()


if __name__ == "__main__":
    sys.exit(main())
