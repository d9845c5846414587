"""Command base classes for the kokaq shell."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Sequence, Tuple

from ..client import KokaqClient, KokaqError, QueueClient
from ..context import ShellContext
from ..guard import check_preconditions
from ..output import emit_error
from ..parser import CommandKind

EXIT_USAGE = 1
EXIT_REMOTE = 2


class UsageError(ValueError):
    """Raised when a command line does not match the command's grammar."""


@dataclass
class Command:
    """Abstract command description.

    ``run`` drives the full pipeline: argument parsing, the selection
    check for :attr:`kind`, then :meth:`execute`.  Subclasses implement
    ``parse_args`` and ``execute``.
    """

    name: str
    description: str
    section: str = "Utility"
    usage: Sequence[Tuple[str, str]] = field(default_factory=tuple)

    @property
    def kind(self) -> CommandKind:
        return CommandKind(self.name)

    def parse_args(self, argv: List[str]) -> Any:
        if argv:
            raise UsageError(f"usage: {self.name}")
        return None

    def execute(self, ctx: ShellContext, args: Any) -> int:
        raise NotImplementedError("Command must implement execute()")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        try:
            args = self.parse_args(argv)
        except UsageError as exc:
            emit_error(ctx, message=str(exc))
            return EXIT_USAGE
        hint = check_preconditions(self.kind, ctx)
        if hint:
            emit_error(ctx, message=hint)
            return EXIT_USAGE
        try:
            return self.execute(ctx, args)
        except KokaqError as exc:
            emit_error(ctx, message=str(exc), data={"kind": exc.kind.value})
            return EXIT_REMOTE

    def format_help(self) -> List[str]:
        rows = self.usage or ((self.name, self.description),)
        return [f"  {syntax:<30} {text}" for syntax, text in rows]


def require_client(ctx: ShellContext) -> KokaqClient:
    return ctx.ensure_client()


def selected_queue(ctx: ShellContext) -> QueueClient:
    """Resolve the selected queue on the server."""
    client = require_client(ctx)
    return client.get_queue_client(ctx.current_namespace, ctx.current_queue)
