"""Adapter from the editor's diagnostics store to mentor error findings."""
from __future__ import annotations

import logging
from typing import Callable

from codecraft.core.events import Disposable
from codecraft.lang.diagnostics import DiagnosticsStore
from codecraft.mentor.messages import ErrorFinding
from codecraft.workspace.editor_host import TextDocument

logger = logging.getLogger(__name__)


class DiagnosticsAdapter:
    """Read findings per document and forward change notifications.

    Change notifications are not filtered: subscribers hear about every
    document and decide themselves whether the active one is affected.
    """

    def __init__(self, store: DiagnosticsStore, documents: Callable[[str], TextDocument | None]) -> None:
        self.store = store
        self._documents = documents

    def get_findings(self, document_id: str) -> list[ErrorFinding]:
        document = self._documents(document_id)
        findings: list[ErrorFinding] = []
        for diagnostic in self.store.get(document_id):
            source_text = document.line_at(diagnostic.line) if document else ""
            findings.append(ErrorFinding.from_diagnostic(diagnostic, source_text))
        return findings

    def has_findings(self, document_id: str) -> bool:
        return bool(self.store.get(document_id))

    def subscribe(self, callback: Callable[[str], None]) -> Disposable:
        self.store.diagnostics_changed.connect(callback)

        def _disconnect() -> None:
            try:
                self.store.diagnostics_changed.disconnect(callback)
            except (RuntimeError, TypeError):
                logger.debug("Diagnostics subscriber already disconnected")

        return Disposable(_disconnect)
