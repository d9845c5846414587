"""Queue management command (scoped to the selected namespace)."""

from __future__ import annotations

from typing import List

from .base import Command, require_client
from .namespace import NamespaceArgs, parse_subcommand
from ..context import ShellContext
from ..output import emit_result, format_names


class QueueCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "queue",
            "Manage queues in the current namespace",
            section="Queue Commands",
            usage=(
                ("queue create <queue>", "Create a new queue in current namespace"),
                ("queue delete <queue>", "Delete a queue from current namespace"),
                ("queue list", "List queues in selected namespace"),
                ("queue use <queue>", "Set current queue"),
            ),
        )

    def parse_args(self, argv: List[str]) -> NamespaceArgs:
        return parse_subcommand(self.name, argv)

    def execute(self, ctx: ShellContext, args: NamespaceArgs) -> int:
        subcmd, name = args
        client = require_client(ctx)
        namespace = ctx.current_namespace
        if subcmd == "list":
            names = client.list_queues(namespace)
            emit_result(
                ctx,
                message=format_names("Queues", names),
                data={"namespace": namespace, "queues": sorted(names)},
            )
            return 0
        data = {"namespace": namespace, "queue": name}
        if subcmd == "create":
            client.create_queue(namespace, name)
            ctx.select_queue(name)
            emit_result(ctx, message=f"Created queue: {name}\nSelected queue: {name}", data={"result": "created", **data})
        elif subcmd == "delete":
            client.get_queue_client(namespace, name).delete()
            ctx.forget_queue(name)
            emit_result(ctx, message=f"Deleted queue: {name}", data={"result": "deleted", **data})
        else:
            client.get_queue_client(namespace, name)
            ctx.select_queue(name)
            emit_result(ctx, message=f"Selected queue: {name}", data={"result": "selected", **data})
        return 0
