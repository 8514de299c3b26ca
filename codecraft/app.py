"""Application bootstrap for the CodeCraft mentor."""
from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path

from PySide6.QtWidgets import QApplication

from codecraft.core.config import ConfigManager
from codecraft.core.events import CommandRegistry
from codecraft.core.logging import configure_logging, logging_options, reset_logging
from codecraft.extension import MentorExtension, activate
from codecraft.lang.analyzer import AnalysisScheduler
from codecraft.ui.main_window import MainWindow
from codecraft.workspace.editor_host import EditorHost


class MentorApplication:
    """Owns application-wide objects and startup sequence."""

    def __init__(self, argv: list[str] | None = None) -> None:
        self.args = self._parse_args(argv)
        self.config = ConfigManager()
        configure_logging(**logging_options(self.config.section("logging"), self.args.verbose))
        self.logger = logging.getLogger(__name__)
        self.qt_app = QApplication.instance() or QApplication(sys.argv)
        self._install_exception_hook()
        self.host = EditorHost()
        self.commands = CommandRegistry()
        self.analysis = AnalysisScheduler(
            self.host.diagnostics,
            delay_ms=int(self.config.section("analysis").get("delay_ms", 400)),
        )
        self.main_window = MainWindow(self.host, self.commands, self.analysis)
        self.extension: MentorExtension = activate(self.host, self.commands, self.config)

    def _parse_args(self, argv: list[str] | None) -> argparse.Namespace:
        parser = argparse.ArgumentParser(description="CodeCraft AI coding mentor")
        parser.add_argument("path", nargs="?", help="Python file to open")
        parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
        return parser.parse_args(argv)

    def run(self) -> int:
        try:
            if self.args.path and Path(self.args.path).is_file():
                self.main_window.open_file(self.args.path)
            else:
                self.main_window.open_scratch()
            self.main_window.show()
            return self.qt_app.exec()
        except Exception:
            self.logger.exception("Unhandled exception in main loop")
            return 1
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        self.extension.deactivate()
        self.main_window.close()
        reset_logging()

    # Error handling
    def _install_exception_hook(self) -> None:
        sys.excepthook = self._handle_exception  # type: ignore[assignment]

    def _handle_exception(self, exc_type, exc_value, exc_tb) -> None:  # type: ignore[override]
        formatted = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
        logging.error("Uncaught exception:\n%s", formatted)
