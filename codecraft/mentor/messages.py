"""Message types exchanged between the mentor controller and its panel.

Every message crossing the channel is a plain JSON object with a ``command``
discriminator. The dataclasses here are the typed view of that wire format:
the controller builds outbound messages, the panel builds inbound ones, and
``parse_inbound``/``parse_outbound`` turn wire dictionaries back into typed
messages (returning ``None`` for anything unrecognised or malformed).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Mapping, Union

from codecraft.lang.diagnostics import Diagnostic


class Tab(str, Enum):
    """Tabs shown by the mentor panel."""

    CHAT = "chat"
    JOURNAL = "journal"


class ResponseMode(str, Enum):
    """How the mentor presents its answers."""

    TEXT = "text"
    VISUAL = "visual"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ChatMessage:
    """A single entry in the chat log."""

    text: str
    is_user: bool
    timestamp: str

    @classmethod
    def from_user(cls, text: str) -> "ChatMessage":
        return cls(text=text, is_user=True, timestamp=_utc_timestamp())

    @classmethod
    def from_assistant(cls, text: str) -> "ChatMessage":
        return cls(text=text, is_user=False, timestamp=_utc_timestamp())

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "isUser": self.is_user, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        return cls(text=str(data["text"]), is_user=bool(data["isUser"]), timestamp=str(data["timestamp"]))


@dataclass
class ErrorFinding:
    """A diagnostic translated for display, with 1-based positions."""

    message: str
    code: str | int | None
    line: int
    column: int
    source_text: str

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic, source_text: str) -> "ErrorFinding":
        return cls(
            message=diagnostic.message,
            code=diagnostic.code,
            line=diagnostic.line + 1,
            column=diagnostic.col + 1,
            source_text=source_text,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "line": self.line,
            "column": self.column,
            "sourceText": self.source_text,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ErrorFinding":
        return cls(
            message=str(data["message"]),
            code=data.get("code"),
            line=int(data["line"]),
            column=int(data["column"]),
            source_text=str(data.get("sourceText", "")),
        )


@dataclass
class Message:
    """Base class for channel messages."""

    command: ClassVar[str] = ""

    def payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"command": self.command, **self.payload()}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Message":
        return cls()


# Panel -> controller -------------------------------------------------------
@dataclass
class SendMessage(Message):
    command: ClassVar[str] = "sendMessage"
    text: str = ""

    def payload(self) -> dict[str, Any]:
        return {"text": self.text}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "SendMessage":
        text = data["text"]
        if not isinstance(text, str):
            raise TypeError("sendMessage text must be a string")
        return cls(text=text)


@dataclass
class ToggleMode(Message):
    command: ClassVar[str] = "toggleMode"
    mode: ResponseMode = ResponseMode.TEXT

    def payload(self) -> dict[str, Any]:
        return {"mode": self.mode.value}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ToggleMode":
        return cls(mode=ResponseMode(data["mode"]))


@dataclass
class OpenLearningJournal(Message):
    command: ClassVar[str] = "openLearningJournal"


@dataclass
class RequestExplanation(Message):
    command: ClassVar[str] = "requestExplanation"


# Controller -> panel -------------------------------------------------------
@dataclass
class ReceiveMessage(Message):
    command: ClassVar[str] = "receiveMessage"
    message: ChatMessage | None = None

    def payload(self) -> dict[str, Any]:
        return {"message": self.message.to_dict() if self.message else None}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ReceiveMessage":
        return cls(message=ChatMessage.from_dict(data["message"]))


@dataclass
class UpdateDiagnostics(Message):
    command: ClassVar[str] = "updateDiagnostics"
    has_errors: bool = False

    def payload(self) -> dict[str, Any]:
        return {"hasErrors": self.has_errors}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "UpdateDiagnostics":
        return cls(has_errors=bool(data["hasErrors"]))


@dataclass
class ExplainError(Message):
    command: ClassVar[str] = "explainError"
    error: ErrorFinding | None = None

    def payload(self) -> dict[str, Any]:
        return {"error": self.error.to_dict() if self.error else None}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ExplainError":
        return cls(error=ErrorFinding.from_dict(data["error"]))


@dataclass
class ShowLearningJournal(Message):
    command: ClassVar[str] = "showLearningJournal"


InboundMessage = Union[SendMessage, ToggleMode, OpenLearningJournal, RequestExplanation]
OutboundMessage = Union[ReceiveMessage, UpdateDiagnostics, ExplainError, ShowLearningJournal]

INBOUND_MESSAGES: dict[str, type[Message]] = {
    cls.command: cls for cls in (SendMessage, ToggleMode, OpenLearningJournal, RequestExplanation)
}
OUTBOUND_MESSAGES: dict[str, type[Message]] = {
    cls.command: cls for cls in (ReceiveMessage, UpdateDiagnostics, ExplainError, ShowLearningJournal)
}


def _parse(data: Any, registry: Mapping[str, type[Message]]) -> Message | None:
    if not isinstance(data, Mapping):
        return None
    command = data.get("command")
    if not isinstance(command, str) or command not in registry:
        return None
    try:
        return registry[command].from_payload(data)
    except (KeyError, TypeError, ValueError, AttributeError):
        return None


def parse_inbound(data: Any) -> Message | None:
    """Return the typed inbound message for ``data`` or ``None``."""

    return _parse(data, INBOUND_MESSAGES)


def parse_outbound(data: Any) -> Message | None:
    """Return the typed outbound message for ``data`` or ``None``."""

    return _parse(data, OUTBOUND_MESSAGES)
