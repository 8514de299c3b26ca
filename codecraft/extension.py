"""Activation of the mentor inside an editor host."""
from __future__ import annotations

import logging

from codecraft.core.config import ConfigManager
from codecraft.core.events import CommandDescriptor, CommandRegistry, Disposable
from codecraft.mentor.controller import MentorPanelController
from codecraft.mentor.diagnostics import DiagnosticsAdapter
from codecraft.mentor.reply_service import ReplyService
from codecraft.workspace.editor_host import EditorHost

logger = logging.getLogger(__name__)

OPEN_MENTOR_COMMAND = "codecraft.openAIMentor"
EXPLAIN_ERROR_COMMAND = "codecraft.explainError"


class MentorExtension:
    """Registers the mentor's host actions and diagnostics subscription."""

    def __init__(
        self,
        host: EditorHost,
        commands: CommandRegistry,
        config: ConfigManager | None = None,
        reply_service: ReplyService | None = None,
    ) -> None:
        self.host = host
        self.commands = commands
        self.diagnostics = DiagnosticsAdapter(host.diagnostics, host.document)
        self.controller = MentorPanelController(host, self.diagnostics, reply_service, config)
        self._subscriptions: list[Disposable] = []

    def activate(self) -> None:
        logger.info("CodeCraft mentor is now active")
        self._subscriptions.append(
            self.commands.register_command(
                CommandDescriptor(OPEN_MENTOR_COMMAND, "Open AI Coding Mentor", self.open_mentor)
            )
        )
        self._subscriptions.append(
            self.commands.register_command(
                CommandDescriptor(EXPLAIN_ERROR_COMMAND, "Explain Current Error", self.explain_error)
            )
        )
        self._subscriptions.append(self.diagnostics.subscribe(self._on_diagnostics_changed))
        self.host.active_document_changed.connect(self._on_active_document_changed)
        self._subscriptions.append(Disposable(self._disconnect_host))
        if self.controller.current_panel is not None:
            self.controller.reveal()

    def deactivate(self) -> None:
        while self._subscriptions:
            self._subscriptions.pop().dispose()
        self.controller.dispose()

    # Actions -----------------------------------------------------------
    def open_mentor(self) -> None:
        self.controller.create_or_show()

    def explain_error(self) -> None:
        if self.controller.current_panel is not None:
            self.controller.explain_current_error()
            return
        self.controller.create_or_show()
        self.controller.when_ready(self.controller.explain_current_error)

    def _on_diagnostics_changed(self, _uri: str) -> None:
        if self.controller.current_panel is not None:
            self.controller.update_diagnostics()

    def _on_active_document_changed(self, _document) -> None:
        if self.controller.current_panel is not None:
            self.controller.update_diagnostics()

    def _disconnect_host(self) -> None:
        try:
            self.host.active_document_changed.disconnect(self._on_active_document_changed)
        except (RuntimeError, TypeError):
            logger.debug("Active document listener already disconnected")


def activate(
    host: EditorHost,
    commands: CommandRegistry,
    config: ConfigManager | None = None,
    reply_service: ReplyService | None = None,
) -> MentorExtension:
    extension = MentorExtension(host, commands, config, reply_service)
    extension.activate()
    return extension
