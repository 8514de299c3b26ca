"""Syntax analysis that feeds the diagnostics store."""
from __future__ import annotations

import ast
import logging
import warnings

from PySide6.QtCore import QObject, QTimer

from codecraft.lang.diagnostics import Diagnostic, DiagnosticsStore

logger = logging.getLogger(__name__)


class PythonSyntaxAnalyzer:
    """Reports syntax errors and compile warnings for Python sources."""

    def analyze(self, uri: str, text: str) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                ast.parse(text, filename=uri)
            except SyntaxError as exc:
                diagnostics.append(self._from_syntax_error(uri, exc))
        for warning in caught:
            lineno = getattr(warning, "lineno", 1) or 1
            diagnostics.append(
                Diagnostic(
                    file=uri,
                    line=max(lineno - 1, 0),
                    col=0,
                    severity="warning",
                    message=str(warning.message),
                    code=warning.category.__name__,
                )
            )
        return diagnostics

    def _from_syntax_error(self, uri: str, exc: SyntaxError) -> Diagnostic:
        # SyntaxError positions are 1-based; diagnostics are 0-based.
        line = (exc.lineno or 1) - 1
        col = (exc.offset or 1) - 1
        return Diagnostic(
            file=uri,
            line=max(line, 0),
            col=max(col, 0),
            severity="error",
            message=exc.msg,
            code=type(exc).__name__,
        )


class AnalysisScheduler(QObject):
    """Debounce document edits and publish analyzer results."""

    def __init__(
        self,
        store: DiagnosticsStore,
        analyzer: PythonSyntaxAnalyzer | None = None,
        delay_ms: int = 400,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.store = store
        self.analyzer = analyzer or PythonSyntaxAnalyzer()
        self._pending: dict[str, str] = {}
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self.flush)

    def schedule(self, uri: str, text: str) -> None:
        self._pending[uri] = text
        self._timer.start()

    def flush(self) -> None:
        pending, self._pending = self._pending, {}
        for uri, text in pending.items():
            diagnostics = self.analyzer.analyze(uri, text)
            logger.debug("Analyzed %s: %d finding(s)", uri, len(diagnostics))
            self.store.set_diagnostics(uri, diagnostics)
