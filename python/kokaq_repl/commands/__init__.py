"""Command registry for the kokaq shell."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import Command, UsageError
from .exit import ExitCommand
from .help import HelpCommand
from .message import AckCommand, DequeueCommand, EnqueueCommand, NackCommand, PeekCommand
from .namespace import NamespaceCommand
from .queue import QueueCommand
from ..parser import CommandKind


class CommandRegistry:
    """Maps each command kind to its handler."""

    def __init__(self) -> None:
        self._commands: Dict[CommandKind, Command] = {}
        self._ordered: List[Command] = []

    def register(self, command: Command) -> None:
        if command.kind in self._commands:
            raise ValueError(f"command '{command.name}' registered twice")
        self._ordered.append(command)
        self._commands[command.kind] = command

    def get(self, kind: Optional[CommandKind]) -> Optional[Command]:
        if kind is None:
            return None
        return self._commands.get(kind)

    def list_commands(self) -> Iterable[Command]:
        return self._ordered

    def missing_kinds(self) -> List[CommandKind]:
        return [kind for kind in CommandKind if kind not in self._commands]


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    commands = [
        NamespaceCommand(),
        QueueCommand(),
        EnqueueCommand(),
        DequeueCommand(),
        AckCommand(),
        NackCommand(),
        PeekCommand(),
        HelpCommand(),
        ExitCommand(),
    ]
    for command in commands:
        registry.register(command)
        bind = getattr(command, "bind", None)
        if callable(bind):
            bind(registry)
    missing = registry.missing_kinds()
    if missing:
        raise RuntimeError(f"no handler for: {', '.join(kind.value for kind in missing)}")
    return registry


__all__ = ["Command", "CommandRegistry", "UsageError", "build_registry"]
