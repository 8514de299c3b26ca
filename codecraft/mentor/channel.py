"""Duplex message channel between the mentor controller and its panel.

Each direction is an independent FIFO. ``post_message`` serializes the message
to JSON and queues it on the peer; delivery happens on a later turn of the Qt
event loop, in send order. There is no acknowledgement and no retry. Once the
channel is closed, sends return ``False`` and anything still queued is
dropped.
"""
from __future__ import annotations

import json
import logging
from collections import deque
from typing import Any, Callable, Mapping

from PySide6.QtCore import QTimer

from codecraft.core.events import Disposable
from codecraft.mentor.messages import Message

logger = logging.getLogger(__name__)

MessageListener = Callable[[dict[str, Any]], None]


class ChannelEndpoint:
    """One side of a :class:`MessageChannel`."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.peer: ChannelEndpoint | None = None
        self._listeners: list[MessageListener] = []
        self._inbox: deque[str] = deque()
        self._flush_scheduled = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def on_message(self, listener: MessageListener) -> Disposable:
        """Register ``listener`` for messages arriving at this endpoint."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(_remove)

    def post_message(self, message: Message | Mapping[str, Any]) -> bool:
        """Queue ``message`` for the peer; returns ``False`` if it was dropped."""

        data = message.to_dict() if isinstance(message, Message) else dict(message)
        if not data.get("command"):
            raise ValueError("channel messages require a 'command' field")
        peer = self.peer
        if self._closed or peer is None or peer.closed:
            logger.debug("%s: dropped %s after close", self.name, data["command"])
            return False
        peer._enqueue(json.dumps(data))
        return True

    def _enqueue(self, raw: str) -> None:
        self._inbox.append(raw)
        if not self._flush_scheduled:
            self._flush_scheduled = True
            QTimer.singleShot(0, self._flush)

    def _flush(self) -> None:
        self._flush_scheduled = False
        while self._inbox and not self._closed:
            data = json.loads(self._inbox.popleft())
            for listener in list(self._listeners):
                try:
                    listener(data)
                except Exception:  # noqa: BLE001
                    logger.exception("%s: listener failed for %s", self.name, data.get("command"))

    def close(self) -> None:
        self._closed = True
        self._inbox.clear()
        self._listeners.clear()


class MessageChannel:
    """Pair of connected endpoints: ``controller_end`` and ``surface_end``."""

    def __init__(self) -> None:
        self.controller_end = ChannelEndpoint("controller")
        self.surface_end = ChannelEndpoint("surface")
        self.controller_end.peer = self.surface_end
        self.surface_end.peer = self.controller_end

    @property
    def closed(self) -> bool:
        return self.controller_end.closed and self.surface_end.closed

    def close(self) -> None:
        self.controller_end.close()
        self.surface_end.close()
