"""Minimal editor window hosting the mentor panel."""
from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QLabel, QMainWindow, QPlainTextEdit, QSplitter, QStatusBar, QToolBar, QWidget

from codecraft.core.events import CommandRegistry
from codecraft.extension import EXPLAIN_ERROR_COMMAND, OPEN_MENTOR_COMMAND
from codecraft.lang.analyzer import AnalysisScheduler
from codecraft.workspace.editor_host import EditorHost

logger = logging.getLogger(__name__)

EDITOR_COLUMN = 1
PANEL_COLUMN = 2


class MainWindow(QMainWindow):
    """Single-document editor: text on the left, mentor panel on the right."""

    def __init__(self, host: EditorHost, commands: CommandRegistry, analysis: AnalysisScheduler) -> None:
        super().__init__()
        self.host = host
        self.commands = commands
        self.analysis = analysis
        self.setWindowTitle("CodeCraft")
        self.resize(1100, 700)

        self.editor = QPlainTextEdit(self)
        self.editor.textChanged.connect(self._on_text_changed)
        self.splitter = QSplitter(Qt.Horizontal, self)
        self.splitter.addWidget(self.editor)
        self.setCentralWidget(self.splitter)

        self.status = QStatusBar(self)
        self.diagnostics_label = QLabel("", self.status)
        self.status.addPermanentWidget(self.diagnostics_label)
        self.setStatusBar(self.status)

        self._create_toolbar()

        host.preferred_column = EDITOR_COLUMN
        host.panel_parent = self.splitter
        host.set_panel_placer(self._place_panel)
        host.notice.connect(lambda message: self.status.showMessage(message, 3000))
        host.diagnostics.diagnostics_changed.connect(self._on_diagnostics_changed)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Mentor", self)
        for command_id, text in (
            (OPEN_MENTOR_COMMAND, "Open AI Mentor"),
            (EXPLAIN_ERROR_COMMAND, "Explain Error"),
        ):
            action = QAction(text, self)
            action.triggered.connect(lambda _checked=False, cid=command_id: self.commands.execute(cid))
            toolbar.addAction(action)
        self.addToolBar(toolbar)

    def _place_panel(self, panel: QWidget, column: int | None) -> None:
        # The mentor always opens beside the editor column.
        if self.splitter.indexOf(panel) == -1:
            self.splitter.addWidget(panel)
        logger.debug("Placed mentor panel (requested column=%s)", column)

    # Documents ---------------------------------------------------------
    def open_file(self, path: str) -> None:
        target = Path(path)
        text = target.read_text(encoding="utf-8")
        uri = target.resolve().as_uri()
        self.host.open_document(uri, text)
        self.editor.blockSignals(True)
        self.editor.setPlainText(text)
        self.editor.blockSignals(False)
        self.setWindowTitle(f"CodeCraft - {target.name}")
        self.analysis.schedule(uri, text)

    def open_scratch(self) -> None:
        self.host.open_document("untitled:scratch.py", "")

    def _on_text_changed(self) -> None:
        document = self.host.active_document
        if document is None:
            return
        text = self.editor.toPlainText()
        self.host.update_document(document.uri, text)
        self.analysis.schedule(document.uri, text)

    def _on_diagnostics_changed(self, uri: str) -> None:
        document = self.host.active_document
        if document is None or document.uri != uri:
            return
        count = len(self.host.diagnostics.get(uri))
        self.diagnostics_label.setText(f"{count} problem(s)" if count else "")
