"""Help command."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .base import Command
from ..context import ShellContext
from ..output import emit_result

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry

HEADER = """kokaq repl help guide

This interactive shell lets you manage namespaces and queues,
and perform message operations on a distributed priority queue system."""

NOTES = """Notes
- You must first 'namespace use' and then 'queue use' before message operations.
- Dequeued messages stay locked until you 'ack' or 'nack' them with the printed lock id.
- Press Ctrl+C to leave the shell."""


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "Show help guide", usage=(("help", "Show help menu"),))
        self._registry: Optional[CommandRegistry] = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def render(self) -> str:
        sections: dict[str, List[str]] = {}
        for command in self._registry.list_commands() if self._registry else [self]:
            sections.setdefault(command.section, []).extend(command.format_help())
        blocks = [HEADER]
        for title, rows in sections.items():
            blocks.append("\n".join([title, *rows]))
        blocks.append(NOTES)
        return "\n\n".join(blocks)

    def execute(self, ctx: ShellContext, args: None) -> int:
        emit_result(ctx, message=self.render())
        return 0
