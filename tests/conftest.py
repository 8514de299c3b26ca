"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from codecraft.mentor.channel import ChannelEndpoint  # noqa: E402
from codecraft.mentor.controller import MentorPanelController  # noqa: E402
from codecraft.mentor.diagnostics import DiagnosticsAdapter  # noqa: E402
from codecraft.mentor.reply_service import MockReplyService  # noqa: E402
from codecraft.workspace.editor_host import EditorHost  # noqa: E402


@pytest.fixture(scope="session")
def qt_app():
    """Provide a shared QApplication instance for widget tests."""

    return QApplication.instance() or QApplication([])


class Recorder:
    """Collects every message delivered to a channel endpoint."""

    def __init__(self, endpoint: ChannelEndpoint) -> None:
        self.messages: list[dict[str, Any]] = []
        self.subscription = endpoint.on_message(self.messages.append)

    def commands(self) -> list[str]:
        return [message["command"] for message in self.messages]

    def of(self, command: str) -> list[dict[str, Any]]:
        return [message for message in self.messages if message["command"] == command]

    def clear(self) -> None:
        self.messages.clear()


@pytest.fixture
def record():
    return Recorder


@pytest.fixture
def host(qt_app) -> EditorHost:
    return EditorHost()


@pytest.fixture
def controller(host: EditorHost):
    adapter = DiagnosticsAdapter(host.diagnostics, host.document)
    ctl = MentorPanelController(host, adapter, MockReplyService(delay_ms=20))
    yield ctl
    ctl.dispose()


@pytest.fixture
def ready_panel(qtbot, controller: MentorPanelController):
    """A created panel that finished its first render and initial sync."""

    def _open():
        panel = controller.create_or_show()
        qtbot.waitUntil(lambda: panel.is_ready)
        qtbot.wait(20)
        return panel

    return _open
