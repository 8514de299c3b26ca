"""Controller owning the single mentor panel and routing its messages."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from PySide6.QtCore import QObject, Signal

from codecraft.core.config import ConfigManager
from codecraft.core.events import Disposable
from codecraft.mentor.channel import ChannelEndpoint, MessageChannel
from codecraft.mentor.diagnostics import DiagnosticsAdapter
from codecraft.mentor.messages import (
    ExplainError,
    Message,
    OpenLearningJournal,
    ReceiveMessage,
    RequestExplanation,
    ResponseMode,
    SendMessage,
    ShowLearningJournal,
    ToggleMode,
    UpdateDiagnostics,
    parse_inbound,
)
from codecraft.mentor.reply_service import MockReplyService, ReplyGuard, ReplyService
from codecraft.mentor.surface import MentorSurface
from codecraft.workspace.editor_host import EditorHost

logger = logging.getLogger(__name__)


def _response_mode(value: Any) -> ResponseMode:
    try:
        return ResponseMode(value)
    except ValueError:
        logger.warning("Unknown mentor.default_mode %r, using %s", value, ResponseMode.TEXT.value)
        return ResponseMode.TEXT


class MentorPanelController(QObject):
    """Create, reuse and tear down the one mentor panel.

    The controller keeps no UI state of its own: the chat log, active tab and
    response mode live in the panel. All it holds is the current panel, the
    controller end of the panel's channel and the subscriptions to release
    when the panel goes away.
    """

    panel_created = Signal(object)
    panel_disposed = Signal()

    def __init__(
        self,
        host: EditorHost,
        diagnostics: DiagnosticsAdapter,
        reply_service: ReplyService | None = None,
        config: ConfigManager | None = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.host = host
        self.diagnostics = diagnostics
        settings = config.section("mentor") if config else {}
        self.title = settings.get("panel_title", "AI Coding Mentor")
        self.default_mode = _response_mode(settings.get("default_mode", ResponseMode.TEXT.value))
        self.reply_timeout_ms: int | None = settings.get("reply_timeout_ms", 15000)
        self.reply_service = reply_service or MockReplyService(settings.get("reply_delay_ms", 1000))
        self.current_panel: MentorSurface | None = None
        self._endpoint: ChannelEndpoint | None = None
        self._channel: MessageChannel | None = None
        self._disposables: list[Disposable] = []
        self._lock = threading.RLock()
        self._handlers: dict[type[Message], Callable[[Any], None]] = {
            SendMessage: self._handle_user_message,
            ToggleMode: self._toggle_mode,
            OpenLearningJournal: self._show_learning_journal,
            RequestExplanation: lambda _message: self.explain_current_error(),
        }

    # Lifecycle ---------------------------------------------------------
    def create_or_show(self, column: int | None = None) -> MentorSurface:
        """Focus the existing panel, or create it if there is none."""

        if column is None:
            column = self.host.preferred_column
        with self._lock:
            if self.current_panel is not None:
                self.current_panel.reveal(column)
                return self.current_panel

            channel = MessageChannel()
            panel = MentorSurface(
                channel.surface_end,
                title=self.title,
                default_mode=self.default_mode,
                parent=self.host.panel_parent,
            )
            self.current_panel = panel
            self._channel = channel
            self._endpoint = channel.controller_end

        self._disposables.append(self._endpoint.on_message(self._on_message))
        panel.disposed.connect(self.dispose)
        self._disposables.append(Disposable(lambda: self._disconnect_panel(panel)))

        self.host.attach_panel(panel, column)
        panel.render()
        panel.reveal(column)
        self.when_ready(self.update_diagnostics)
        logger.info("Created mentor panel (column=%s)", column)
        self.panel_created.emit(panel)
        return panel

    def reveal(self) -> None:
        panel = self.current_panel
        if panel is None:
            logger.debug("reveal() without a mentor panel")
            return
        panel.reveal()

    def when_ready(self, callback: Callable[[], None]) -> bool:
        """Run ``callback`` once the current panel finished its first render.

        Returns ``False`` when there is no panel. The callback is skipped if the
        panel is disposed before it becomes ready.
        """

        panel = self.current_panel
        if panel is None:
            return False
        if panel.is_ready:
            callback()
            return True

        def _on_ready() -> None:
            if self.current_panel is panel:
                callback()

        panel.ready.connect(_on_ready)
        return True

    def dispose(self) -> None:
        """Tear down the panel; safe to call any number of times."""

        with self._lock:
            panel, self.current_panel = self.current_panel, None
            channel, self._channel = self._channel, None
            self._endpoint = None
            disposables, self._disposables = self._disposables, []
        if panel is None and channel is None and not disposables:
            return

        if channel is not None:
            channel.close()
        if panel is not None:
            panel.dispose()
        while disposables:
            disposables.pop().dispose()
        logger.info("Disposed mentor panel")
        self.panel_disposed.emit()

    def _disconnect_panel(self, panel: MentorSurface) -> None:
        try:
            panel.disposed.disconnect(self.dispose)
        except (RuntimeError, TypeError):
            logger.debug("Mentor panel signals already released")

    # Host-facing operations --------------------------------------------
    def explain_current_error(self) -> None:
        """Send the first finding of the active document to the panel."""

        document = self.host.active_document
        if document is None:
            return
        findings = self.diagnostics.get_findings(document.uri)
        if not findings:
            return
        self._post(ExplainError(error=findings[0]))

    def update_diagnostics(self) -> None:
        """Tell the panel whether the active document has findings."""

        document = self.host.active_document
        if document is None:
            return
        self._post(UpdateDiagnostics(has_errors=self.diagnostics.has_findings(document.uri)))

    # Message handling --------------------------------------------------
    def _on_message(self, data: dict[str, Any]) -> None:
        message = parse_inbound(data)
        handler = self._handlers.get(type(message)) if message is not None else None
        if handler is None:
            logger.debug("Ignoring panel message: %r", data.get("command"))
            return
        handler(message)

    def _handle_user_message(self, message: SendMessage) -> None:
        endpoint = self._endpoint
        if endpoint is None:
            return

        # Replies go to the endpoint that asked; a closed endpoint drops them.
        guard = ReplyGuard(
            lambda reply: endpoint.post_message(ReceiveMessage(message=reply)),
            self.reply_timeout_ms,
        )
        try:
            self.reply_service.request_reply(message.text, guard.on_reply, guard.on_error)
        except Exception as exc:  # noqa: BLE001
            guard.on_error(exc)

    def _toggle_mode(self, message: ToggleMode) -> None:
        self.host.show_information(f"Switched to {message.mode.value} mode")

    def _show_learning_journal(self, _message: OpenLearningJournal) -> None:
        self._post(ShowLearningJournal())

    def _post(self, message: Message) -> bool:
        endpoint = self._endpoint
        if endpoint is None:
            return False
        return endpoint.post_message(message)
