"""Editor-side state the mentor reads: active document, diagnostics, notices."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QWidget

from codecraft.lang.diagnostics import DiagnosticsStore

logger = logging.getLogger(__name__)


@dataclass
class TextDocument:
    uri: str
    text: str = ""

    def line_at(self, line: int) -> str:
        """Return the text of 0-based ``line`` or an empty string."""

        lines = self.text.splitlines()
        if 0 <= line < len(lines):
            return lines[line]
        return ""


class EditorHost(QObject):
    """The editor the mentor panel lives in.

    Owns the open documents, the active document, the diagnostics store and
    the placement of panels. ``notice`` carries information messages meant for
    the user (the status bar in the desktop window).
    """

    active_document_changed = Signal(object)
    notice = Signal(str)

    def __init__(self, diagnostics: DiagnosticsStore | None = None, parent=None) -> None:
        super().__init__(parent)
        self.diagnostics = diagnostics or DiagnosticsStore(self)
        self._documents: dict[str, TextDocument] = {}
        self._active_uri: str | None = None
        self.preferred_column: int | None = None
        self.panel_parent: QWidget | None = None
        self._panel_placer: Callable[[QWidget, int | None], None] | None = None

    # Documents ---------------------------------------------------------
    def open_document(self, uri: str, text: str = "", activate: bool = True) -> TextDocument:
        document = self._documents.get(uri)
        if document is None:
            document = TextDocument(uri, text)
            self._documents[uri] = document
        else:
            document.text = text
        if activate:
            self.set_active_document(uri)
        return document

    def update_document(self, uri: str, text: str) -> None:
        document = self._documents.get(uri)
        if document is not None:
            document.text = text

    def close_document(self, uri: str) -> None:
        self._documents.pop(uri, None)
        self.diagnostics.clear(uri)
        if self._active_uri == uri:
            self.set_active_document(None)

    def document(self, uri: str) -> TextDocument | None:
        return self._documents.get(uri)

    @property
    def active_document(self) -> TextDocument | None:
        if self._active_uri is None:
            return None
        return self._documents.get(self._active_uri)

    def set_active_document(self, uri: str | None) -> None:
        if uri is not None and uri not in self._documents:
            raise KeyError(uri)
        self._active_uri = uri
        self.active_document_changed.emit(self.active_document)

    # Panels and notices ------------------------------------------------
    def set_panel_placer(self, placer: Callable[[QWidget, int | None], None] | None) -> None:
        self._panel_placer = placer

    def attach_panel(self, widget: QWidget, column: int | None) -> None:
        if self._panel_placer is not None:
            self._panel_placer(widget, column)

    def show_information(self, message: str) -> None:
        logger.info(message)
        self.notice.emit(message)
