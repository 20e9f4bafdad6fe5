"""Application bootstrap for the geofilter editor."""

from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication

from . import __version__
from .core.config import ConfigManager
from .ui.main_window import MainWindow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger(__name__)


def create_application() -> QApplication:
    """
    Create and configure the Qt application.

    Returns:
        Configured QApplication instance
    """
    app = QApplication(sys.argv)
    app.setApplicationName("Geofilter Editor")
    app.setApplicationVersion(__version__)
    app.setOrganizationName("Geofilter Editor")
    return app


def create_main_window() -> MainWindow:
    """
    Create the main application window.

    Returns:
        MainWindow instance
    """
    return MainWindow(ConfigManager())


def run() -> int:
    """
    Run the geofilter editor.

    Returns:
        Exit code
    """
    logger.info("Starting Geofilter Editor")

    try:
        app = create_application()
        window = create_main_window()
        window.show()
        logger.info("MainWindow shown")

        return app.exec()

    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main entry point for the application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
