from __future__ import annotations

import pytest

from codecraft.lang.diagnostics import Diagnostic
from codecraft.mentor.messages import (
    ChatMessage,
    ErrorFinding,
    ExplainError,
    OpenLearningJournal,
    ReceiveMessage,
    RequestExplanation,
    ResponseMode,
    SendMessage,
    ShowLearningJournal,
    ToggleMode,
    UpdateDiagnostics,
    parse_inbound,
    parse_outbound,
)


def test_error_finding_shifts_positions_to_one_based() -> None:
    diagnostic = Diagnostic("file:///demo.py", line=4, col=9, severity="error", message="bad", code=7)

    finding = ErrorFinding.from_diagnostic(diagnostic, "    return value")

    assert (finding.line, finding.column) == (5, 10)
    assert finding.code == 7
    assert finding.to_dict() == {
        "message": "bad",
        "code": 7,
        "line": 5,
        "column": 10,
        "sourceText": "    return value",
    }


def test_chat_message_wire_format() -> None:
    message = ChatMessage.from_assistant("hello")

    data = message.to_dict()

    assert set(data) == {"text", "isUser", "timestamp"}
    assert data["isUser"] is False
    assert data["timestamp"].endswith("Z")
    assert ChatMessage.from_dict(data) == message


def test_outbound_messages_carry_command_discriminator() -> None:
    assert UpdateDiagnostics(has_errors=True).to_dict() == {"command": "updateDiagnostics", "hasErrors": True}
    assert ShowLearningJournal().to_dict() == {"command": "showLearningJournal"}
    reply = ReceiveMessage(message=ChatMessage("hi", False, "2024-01-01T00:00:00Z")).to_dict()
    assert reply["command"] == "receiveMessage"
    assert reply["message"]["text"] == "hi"


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"command": "sendMessage", "text": "what is a closure"}, SendMessage(text="what is a closure")),
        ({"command": "toggleMode", "mode": "visual"}, ToggleMode(mode=ResponseMode.VISUAL)),
        ({"command": "openLearningJournal"}, OpenLearningJournal()),
        ({"command": "requestExplanation"}, RequestExplanation()),
    ],
)
def test_parse_inbound_known_commands(data, expected) -> None:
    assert parse_inbound(data) == expected


@pytest.mark.parametrize(
    "data",
    [
        {"command": "selfDestruct"},
        {"text": "no discriminator"},
        {"command": "sendMessage"},
        {"command": "sendMessage", "text": 42},
        {"command": "toggleMode", "mode": "interpretive dance"},
        {"command": "receiveMessage", "message": {"text": "x", "isUser": False, "timestamp": "t"}},
        "sendMessage",
        None,
    ],
)
def test_parse_inbound_rejects_unknown_or_malformed(data) -> None:
    assert parse_inbound(data) is None


def test_parse_outbound_round_trips_explain_error() -> None:
    finding = ErrorFinding("undefined name", None, 3, 1, "print(x)")

    parsed = parse_outbound(ExplainError(error=finding).to_dict())

    assert parsed == ExplainError(error=finding)
    assert parse_outbound({"command": "sendMessage", "text": "wrong direction"}) is None
