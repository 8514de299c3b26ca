"""Reply services that answer the user's chat messages."""
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QTimer

from codecraft.mentor.messages import ChatMessage

logger = logging.getLogger(__name__)

ReplyCallback = Callable[[ChatMessage], None]
ErrorCallback = Callable[[Exception], None]


class ReplyService:
    """Produce an assistant reply for user text, asynchronously.

    Implementations call exactly one of ``on_reply`` or ``on_error`` at some
    later point. There is no cancellation; callers decide what to do with
    replies that arrive after they stopped caring.
    """

    def request_reply(self, text: str, on_reply: ReplyCallback, on_error: ErrorCallback) -> None:
        raise NotImplementedError


class MockReplyService(ReplyService):
    """Stub mentor that acknowledges the question after a fixed delay."""

    def __init__(self, delay_ms: int = 1000) -> None:
        self.delay_ms = delay_ms

    def compose(self, text: str) -> str:
        return f'I understand you\'re asking about "{text}". Let me help you with that...'

    def request_reply(self, text: str, on_reply: ReplyCallback, on_error: ErrorCallback) -> None:
        def _respond() -> None:
            try:
                reply = ChatMessage.from_assistant(self.compose(text))
            except Exception as exc:  # noqa: BLE001
                on_error(exc)
                return
            on_reply(reply)

        QTimer.singleShot(self.delay_ms, _respond)


class ReplyGuard:
    """Deliver at most one outcome for a reply request, with a timeout.

    Whichever of reply, error or timeout happens first wins; later outcomes
    are dropped.
    """

    def __init__(
        self,
        deliver: ReplyCallback,
        timeout_ms: int | None,
        failure_text: Callable[[str], str] | None = None,
    ) -> None:
        self._deliver = deliver
        self._failure_text = failure_text or (lambda reason: f"Sorry, I couldn't answer that ({reason}).")
        self.settled = False
        if timeout_ms is not None and timeout_ms > 0:
            QTimer.singleShot(timeout_ms, self.on_timeout)

    def on_reply(self, message: ChatMessage) -> None:
        if self._settle():
            self._deliver(message)

    def on_error(self, exc: Exception) -> None:
        if self._settle():
            logger.warning("Reply service failed: %s", exc)
            self._deliver(ChatMessage.from_assistant(self._failure_text(str(exc) or type(exc).__name__)))

    def on_timeout(self) -> None:
        if self._settle():
            logger.warning("Reply service timed out")
            self._deliver(ChatMessage.from_assistant(self._failure_text("the request timed out")))

    def _settle(self) -> bool:
        if self.settled:
            return False
        self.settled = True
        return True
