from __future__ import annotations

import pytest

from codecraft.core.events import CommandRegistry
from codecraft.extension import EXPLAIN_ERROR_COMMAND, OPEN_MENTOR_COMMAND, activate
from codecraft.lang.diagnostics import Diagnostic
from codecraft.mentor.reply_service import MockReplyService

URI = "file:///project/app.py"
SOURCE = "def greet(name)\n    return name\n"


@pytest.fixture
def commands() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def extension(host, commands):
    ext = activate(host, commands, reply_service=MockReplyService(delay_ms=10))
    yield ext
    ext.deactivate()


def _syntax_error() -> Diagnostic:
    return Diagnostic(URI, line=0, col=15, severity="error", message="expected ':'", code="SyntaxError")


def test_activate_registers_host_actions(extension, commands) -> None:
    assert {cmd.id for cmd in commands.list_commands()} == {OPEN_MENTOR_COMMAND, EXPLAIN_ERROR_COMMAND}


def test_open_mentor_command_creates_single_panel(extension, commands) -> None:
    assert commands.execute(OPEN_MENTOR_COMMAND)
    panel = extension.controller.current_panel
    assert commands.execute(OPEN_MENTOR_COMMAND)

    assert panel is not None
    assert extension.controller.current_panel is panel


def test_explain_error_on_fresh_panel_waits_for_ready(qtbot, host, extension, commands, record) -> None:
    host.open_document(URI, SOURCE)
    host.diagnostics.set_diagnostics(URI, [_syntax_error()])

    commands.execute(EXPLAIN_ERROR_COMMAND)
    panel = extension.controller.current_panel
    received = record(panel.endpoint)

    qtbot.waitUntil(lambda: len(received.of("explainError")) == 1)
    qtbot.wait(20)
    assert received.commands() == ["updateDiagnostics", "explainError"]
    error = received.of("explainError")[0]["error"]
    assert (error["line"], error["column"]) == (1, 16)
    assert error["sourceText"] == "def greet(name)"


def test_explain_error_on_existing_panel(qtbot, host, extension, commands, record) -> None:
    host.open_document(URI, SOURCE)
    host.diagnostics.set_diagnostics(URI, [_syntax_error()])
    commands.execute(OPEN_MENTOR_COMMAND)
    panel = extension.controller.current_panel
    qtbot.waitUntil(lambda: panel.is_ready)
    qtbot.wait(20)
    received = record(panel.endpoint)

    commands.execute(EXPLAIN_ERROR_COMMAND)

    qtbot.waitUntil(lambda: len(received.messages) == 1)
    assert received.commands() == ["explainError"]


def test_explain_error_without_findings_only_opens_panel(qtbot, host, extension, commands, record) -> None:
    host.open_document(URI, "print('ok')\n")

    commands.execute(EXPLAIN_ERROR_COMMAND)
    panel = extension.controller.current_panel
    received = record(panel.endpoint)

    qtbot.waitUntil(lambda: panel.is_ready)
    qtbot.wait(30)
    assert received.commands() == ["updateDiagnostics"]


def test_diagnostics_changes_for_any_document_refresh_panel(qtbot, host, extension, commands, record) -> None:
    host.open_document("file:///project/other.py", "x = (\n", activate=False)
    host.open_document(URI, SOURCE)
    commands.execute(OPEN_MENTOR_COMMAND)
    panel = extension.controller.current_panel
    qtbot.waitUntil(lambda: panel.is_ready)
    qtbot.wait(20)
    received = record(panel.endpoint)

    host.diagnostics.set_diagnostics("file:///project/other.py", [_syntax_error()])
    qtbot.waitUntil(lambda: len(received.messages) == 1)
    assert received.messages[-1] == {"command": "updateDiagnostics", "hasErrors": False}

    host.diagnostics.set_diagnostics(URI, [_syntax_error()])
    qtbot.waitUntil(lambda: len(received.messages) == 2)
    assert received.messages[-1] == {"command": "updateDiagnostics", "hasErrors": True}


def test_diagnostics_changes_without_panel_are_ignored(host, extension) -> None:
    host.open_document(URI, SOURCE)
    host.diagnostics.set_diagnostics(URI, [_syntax_error()])

    assert extension.controller.current_panel is None


def test_deactivate_releases_everything(qtbot, host, commands) -> None:
    extension = activate(host, commands)
    commands.execute(OPEN_MENTOR_COMMAND)

    extension.deactivate()
    extension.deactivate()

    assert commands.list_commands() == []
    assert extension.controller.current_panel is None
    host.open_document(URI, SOURCE)
    host.diagnostics.set_diagnostics(URI, [_syntax_error()])
    assert not commands.execute(OPEN_MENTOR_COMMAND)


def test_switching_active_document_refreshes_panel(qtbot, host, extension, commands, record) -> None:
    clean = "file:///project/clean.py"
    host.open_document(clean, "print('ok')\n", activate=False)
    host.open_document(URI, SOURCE)
    host.diagnostics.set_diagnostics(URI, [_syntax_error()])
    commands.execute(OPEN_MENTOR_COMMAND)
    panel = extension.controller.current_panel
    qtbot.waitUntil(lambda: panel.has_errors)
    received = record(panel.endpoint)

    host.set_active_document(clean)
    qtbot.waitUntil(lambda: len(received.messages) == 1)
    assert received.messages == [{"command": "updateDiagnostics", "hasErrors": False}]
    assert panel.explain_button.isHidden()

    host.set_active_document(URI)
    qtbot.waitUntil(lambda: len(received.messages) == 2)
    assert received.messages[-1] == {"command": "updateDiagnostics", "hasErrors": True}
