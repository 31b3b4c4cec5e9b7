"""PySide6 application entry point."""

import argparse
import platform
import sys

from PySide6.QtWidgets import QApplication

from .. import __version__, log
from ..config import Config
from ..errors import ConfigError
from .main_window import MainWindow


class ScriptpadApp:
    """Main application."""

    def __init__(self, config: Config):
        self._config = config
        self._app: QApplication | None = None
        self._window: MainWindow | None = None

    def setup(self):
        """Set up the application."""
        # Set desktop filename before creating QApplication (required for Wayland app_id)
        if platform.system() == "Linux":
            QApplication.setDesktopFileName("scriptpad")

        self._app = QApplication.instance() or QApplication(sys.argv)
        self._app.setApplicationName("Scriptpad")

        self._window = MainWindow(self._config)

        self._app.aboutToQuit.connect(self._on_quit)

    def _on_quit(self):
        """Handle application quit."""
        if self._window:
            self._window.cleanup()
        self._config.save()

    def run(self) -> int:
        """Run the application.

        Returns:
            Exit code.
        """
        self._window.show()
        return self._app.exec()


def _parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scriptpad - edit a script and run it through an interpreter")
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to config file (default: scriptpad.yml)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None):
    """Main entry point for GUI application."""
    args = _parse_arguments(argv)

    log.configure(debug=args.debug)
    logger = log.get_logger()
    logger.info(f"scriptpad v{__version__}")
    logger.info("system", platform=platform.system(), python=platform.python_version())

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        logger.error("invalid configuration", error=str(e))
        sys.exit(2)

    logger.info("interpreter", command=[config.interpreter, config.mode_flag, config.script_name])

    app = ScriptpadApp(config)
    app.setup()
    sys.exit(app.run())
