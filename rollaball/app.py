"""Application entry point and setup for Roll-a-Ball."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from rollaball.core.levels import ProgressionGraph
from rollaball.core.progress import ProgressStore
from rollaball.core.scene_config import SceneConfigStore
from rollaball.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load level data and scene config, then open the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Roll-a-Ball")
    app.setApplicationDisplayName("Roll-a-Ball")

    progression = ProgressionGraph.from_yaml()
    progress_store = ProgressStore()
    config_store = SceneConfigStore()
    config = config_store.load()
    logging.info(
        "Scene types: %d procedural, %d static (override file: %s)",
        len(config.procedural_scenes),
        len(config.static_scenes),
        config_store.override_path,
    )

    window = MainWindow(progression=progression, progress_store=progress_store, config_store=config_store)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1100, geometry.width()), min(760, geometry.height()))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
