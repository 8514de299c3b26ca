"""Host action registry and disposable handles."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class Disposable:
    """Handle that runs a release callback at most once."""

    def __init__(self, release: Callable[[], None] | None = None) -> None:
        self._release = release

    @property
    def disposed(self) -> bool:
        return self._release is None

    def dispose(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


@dataclass
class CommandDescriptor:
    """Metadata for an action the host can trigger."""

    id: str
    description: str
    callback: Callable[..., Any]
    arguments: dict[str, Any] = field(default_factory=dict)


class CommandRegistry:
    """Registry of host-triggered actions keyed by command id."""

    def __init__(self) -> None:
        self._commands: list[CommandDescriptor] = []

    def register_command(self, command: CommandDescriptor) -> Disposable:
        self._commands = [cmd for cmd in self._commands if cmd.id != command.id]
        self._commands.append(command)
        return Disposable(lambda: self._unregister(command))

    def _unregister(self, command: CommandDescriptor) -> None:
        self._commands = [cmd for cmd in self._commands if cmd is not command]

    def get(self, command_id: str) -> CommandDescriptor | None:
        for cmd in self._commands:
            if cmd.id == command_id:
                return cmd
        return None

    def list_commands(self) -> List[CommandDescriptor]:
        return list(self._commands)

    def execute(self, command_id: str) -> bool:
        """Run a registered command; returns ``False`` for unknown ids."""

        descriptor = self.get(command_id)
        if descriptor is None:
            logger.warning("Unknown command: %s", command_id)
            return False
        descriptor.callback(**descriptor.arguments)
        return True
