"""Exit command."""

from __future__ import annotations

from .base import Command
from ..context import ShellContext
from ..output import emit_result


class ExitCommand(Command):
    def __init__(self) -> None:
        super().__init__("exit", "Exit the shell", usage=(("exit", "Leave the shell"),))

    def execute(self, ctx: ShellContext, args: None) -> int:
        emit_result(ctx, message="Bye!")
        ctx.disconnect()
        raise SystemExit(0)
