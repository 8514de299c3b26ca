"""Diagnostics published by the editor's live analysis."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from PySide6.QtCore import QObject, Signal


@dataclass
class Diagnostic:
    """A single analysis problem; ``line`` and ``col`` are 0-based."""

    file: str
    line: int
    col: int
    severity: str
    message: str
    code: str | int | None = None


class DiagnosticsStore(QObject):
    """Holds the current diagnostics for every open document.

    ``diagnostics_changed`` is emitted with the document uri whenever the set
    for any document is replaced or cleared.
    """

    diagnostics_changed = Signal(str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._by_document: dict[str, list[Diagnostic]] = {}

    def set_diagnostics(self, uri: str, diagnostics: Iterable[Diagnostic]) -> None:
        self._by_document[uri] = list(diagnostics)
        self.diagnostics_changed.emit(uri)

    def clear(self, uri: str) -> None:
        if self._by_document.pop(uri, None) is not None:
            self.diagnostics_changed.emit(uri)

    def get(self, uri: str) -> list[Diagnostic]:
        return list(self._by_document.get(uri, ()))

    def documents(self) -> list[str]:
        return [uri for uri, diags in self._by_document.items() if diags]
