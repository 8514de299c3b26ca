"""The mentor panel widget: chat, learning journal and error affordance."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from codecraft.mentor.channel import ChannelEndpoint
from codecraft.mentor.messages import (
    ChatMessage,
    ErrorFinding,
    ExplainError,
    Message,
    OpenLearningJournal,
    ReceiveMessage,
    RequestExplanation,
    ResponseMode,
    SendMessage,
    ShowLearningJournal,
    Tab,
    ToggleMode,
    UpdateDiagnostics,
    parse_outbound,
)

logger = logging.getLogger(__name__)

_TAB_ORDER = (Tab.CHAT, Tab.JOURNAL)


@dataclass
class SurfaceState:
    """UI state owned by the panel; kept across hide/show cycles."""

    messages: list[ChatMessage] = field(default_factory=list)
    active_tab: Tab = Tab.CHAT
    response_mode: ResponseMode = ResponseMode.TEXT

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [message.to_dict() for message in self.messages],
            "activeTab": self.active_tab.value,
            "responseMode": self.response_mode.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SurfaceState":
        return cls(
            messages=[ChatMessage.from_dict(item) for item in data.get("messages", [])],
            active_tab=Tab(data.get("activeTab", Tab.CHAT.value)),
            response_mode=ResponseMode(data.get("responseMode", ResponseMode.TEXT.value)),
        )


def explanation_text(error: ErrorFinding) -> str:
    """Chat text shown when the mentor is asked to explain ``error``."""

    location = f"line {error.line}, column {error.column}"
    code = f" [{error.code}]" if error.code not in (None, "") else ""
    parts = [f"Let's look at the error on {location}{code}:", error.message]
    if error.source_text.strip():
        parts.append(f"The line in question:\n    {error.source_text.strip()}")
    return "\n\n".join(parts)


class MentorSurface(QWidget):
    """Panel shown to the user.

    The surface only talks to the controller through its channel endpoint.
    ``ready`` fires once, on the event loop turn after the first render;
    ``disposed`` fires once when the panel is closed by the user or disposed
    by the host.
    """

    ready = Signal()
    disposed = Signal()

    def __init__(
        self,
        endpoint: ChannelEndpoint,
        title: str = "AI Coding Mentor",
        default_mode: ResponseMode = ResponseMode.TEXT,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.endpoint = endpoint
        self.title = title
        self.state = SurfaceState(response_mode=default_mode)
        self.view_column: int | None = None
        self.has_errors = False
        self._ready = False
        self._disposed = False
        self._syncing_tabs = False
        self._build_ui()
        self._subscription = endpoint.on_message(self._handle_message)

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        header = QHBoxLayout()
        self.title_label = QLabel(self.title, self)
        header.addWidget(self.title_label, 1)
        self.text_mode_button = QPushButton("Text Guide", self)
        self.text_mode_button.setCheckable(True)
        self.text_mode_button.clicked.connect(lambda: self.set_response_mode(ResponseMode.TEXT))
        self.visual_mode_button = QPushButton("Visual Metaphor", self)
        self.visual_mode_button.setCheckable(True)
        self.visual_mode_button.clicked.connect(lambda: self.set_response_mode(ResponseMode.VISUAL))
        header.addWidget(self.text_mode_button)
        header.addWidget(self.visual_mode_button)
        layout.addLayout(header)

        self.tabs = QTabWidget(self)
        chat_page = QWidget(self.tabs)
        chat_layout = QVBoxLayout(chat_page)
        self.chat_log = QListWidget(chat_page)
        self.chat_log.setWordWrap(True)
        chat_layout.addWidget(self.chat_log, 1)

        self.explain_button = QPushButton("Explain This Error", chat_page)
        self.explain_button.clicked.connect(lambda: self.request_explanation())
        self.explain_button.hide()
        chat_layout.addWidget(self.explain_button)

        input_row = QHBoxLayout()
        self.input = QLineEdit(chat_page)
        self.input.setPlaceholderText("Ask your mentor...")
        self.input.returnPressed.connect(lambda: self.submit_message())
        self.send_button = QPushButton("Send", chat_page)
        self.send_button.clicked.connect(lambda: self.submit_message())
        input_row.addWidget(self.input, 1)
        input_row.addWidget(self.send_button)
        chat_layout.addLayout(input_row)

        journal_page = QWidget(self.tabs)
        journal_layout = QVBoxLayout(journal_page)
        journal_layout.addWidget(QLabel("Questions you've explored", journal_page))
        self.journal_list = QListWidget(journal_page)
        journal_layout.addWidget(self.journal_list, 1)

        self.tabs.addTab(chat_page, "Chat")
        self.tabs.addTab(journal_page, "Learning Journal")
        self.tabs.currentChanged.connect(self._on_tab_changed)
        layout.addWidget(self.tabs, 1)

    # Lifecycle ---------------------------------------------------------
    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def active_tab(self) -> Tab:
        return self.state.active_tab

    @property
    def response_mode(self) -> ResponseMode:
        return self.state.response_mode

    def render(self) -> None:
        """Draw the widgets from ``state``; the first call schedules ``ready``."""

        self.setWindowTitle(self.title)
        self.chat_log.clear()
        self.journal_list.clear()
        for message in self.state.messages:
            self._add_message_item(message)
        self._sync_tab_widget()
        self._sync_mode_buttons()
        if not self._ready:
            QTimer.singleShot(0, self._mark_ready)

    def _mark_ready(self) -> None:
        if self._ready or self._disposed:
            return
        self._ready = True
        self.ready.emit()

    def reveal(self, column: int | None = None) -> None:
        if self._disposed:
            return
        if column is not None:
            self.view_column = column
        self.show()
        self.raise_()
        self.activateWindow()

    def save_state(self) -> dict[str, Any]:
        return self.state.to_dict()

    def restore_state(self, data: Mapping[str, Any]) -> None:
        self.state = SurfaceState.from_dict(data)
        self.render()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._subscription.dispose()
        self.disposed.emit()
        self.close()
        self.deleteLater()

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt API
        super().closeEvent(event)
        self.dispose()

    # User actions ------------------------------------------------------
    def submit_message(self, text: str | None = None) -> None:
        if not isinstance(text, str):
            text = self.input.text()
        text = text.strip()
        if not text:
            return
        self.input.clear()
        self._append_message(ChatMessage.from_user(text))
        self._post(SendMessage(text=text))

    def select_tab(self, tab: Tab) -> None:
        self._set_tab(Tab(tab), notify=True)

    def set_response_mode(self, mode: ResponseMode) -> None:
        mode = ResponseMode(mode)
        if mode == self.state.response_mode:
            self._sync_mode_buttons()
            return
        self.state.response_mode = mode
        self._sync_mode_buttons()
        self._post(ToggleMode(mode=mode))

    def request_explanation(self) -> None:
        self._post(RequestExplanation())

    # Controller messages -----------------------------------------------
    def _handle_message(self, data: dict[str, Any]) -> None:
        message = parse_outbound(data)
        if isinstance(message, ReceiveMessage) and message.message is not None:
            self._append_message(message.message)
        elif isinstance(message, UpdateDiagnostics):
            self.has_errors = message.has_errors
            self.explain_button.setVisible(message.has_errors)
        elif isinstance(message, ExplainError) and message.error is not None:
            self._append_message(ChatMessage.from_assistant(explanation_text(message.error)))
        elif isinstance(message, ShowLearningJournal):
            self._set_tab(Tab.JOURNAL, notify=False)
        else:
            logger.debug("Panel ignored message: %s", data.get("command"))

    # Helpers -----------------------------------------------------------
    def _post(self, message: Message) -> bool:
        return self.endpoint.post_message(message)

    def _append_message(self, message: ChatMessage) -> None:
        self.state.messages.append(message)
        self._add_message_item(message)

    def _add_message_item(self, message: ChatMessage) -> None:
        speaker = "You" if message.is_user else "Mentor"
        self.chat_log.addItem(QListWidgetItem(f"{speaker}: {message.text}"))
        self.chat_log.scrollToBottom()
        if message.is_user:
            self.journal_list.addItem(QListWidgetItem(message.text))

    def _set_tab(self, tab: Tab, notify: bool) -> None:
        previous = self.state.active_tab
        self.state.active_tab = tab
        self._sync_tab_widget()
        # Only a user-driven switch to the journal is reported back.
        if notify and tab is Tab.JOURNAL and previous is not Tab.JOURNAL:
            self._post(OpenLearningJournal())

    def _on_tab_changed(self, index: int) -> None:
        if self._syncing_tabs or not 0 <= index < len(_TAB_ORDER):
            return
        self._set_tab(_TAB_ORDER[index], notify=True)

    def _sync_tab_widget(self) -> None:
        self._syncing_tabs = True
        try:
            self.tabs.setCurrentIndex(_TAB_ORDER.index(self.state.active_tab))
        finally:
            self._syncing_tabs = False

    def _sync_mode_buttons(self) -> None:
        self.text_mode_button.setChecked(self.state.response_mode is ResponseMode.TEXT)
        self.visual_mode_button.setChecked(self.state.response_mode is ResponseMode.VISUAL)
