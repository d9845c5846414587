"""Namespace management command."""

from __future__ import annotations

from typing import List, Tuple

from .base import Command, UsageError, require_client
from ..context import ShellContext
from ..output import emit_result, format_names

NamespaceArgs = Tuple[str, str]

_NAMED = ("create", "delete", "use")


def parse_subcommand(verb: str, argv: List[str]) -> NamespaceArgs:
    """Split ``<subcommand> [name]`` for the namespace and queue commands."""
    if not argv:
        raise UsageError(f"{verb}: missing subcommand")
    subcmd, rest = argv[0], argv[1:]
    if subcmd in _NAMED:
        if len(rest) != 1:
            raise UsageError(f"usage: {verb} {subcmd} <name>")
        return subcmd, rest[0]
    if subcmd == "list":
        if rest:
            raise UsageError(f"usage: {verb} list")
        return subcmd, ""
    raise UsageError(f"unknown command: {verb} {subcmd}")


class NamespaceCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "namespace",
            "Manage namespaces",
            section="Namespace Commands",
            usage=(
                ("namespace create <namespace>", "Create a new namespace"),
                ("namespace delete <namespace>", "Delete an existing namespace"),
                ("namespace list", "List all namespaces"),
                ("namespace use <namespace>", "Set current namespace"),
            ),
        )

    def parse_args(self, argv: List[str]) -> NamespaceArgs:
        return parse_subcommand(self.name, argv)

    def execute(self, ctx: ShellContext, args: NamespaceArgs) -> int:
        subcmd, name = args
        client = require_client(ctx)
        if subcmd == "list":
            names = client.list_namespaces()
            emit_result(ctx, message=format_names("Namespaces", names), data={"namespaces": sorted(names)})
            return 0
        if subcmd == "create":
            created = client.create_namespace(name)
            ctx.select_namespace(name)
            emit_result(
                ctx,
                message=f"Created namespace: {created}\nSelected namespace: {name}",
                data={"result": "created", "namespace": name},
            )
        elif subcmd == "delete":
            client.get_namespace_client(name).delete()
            ctx.forget_namespace(name)
            emit_result(ctx, message=f"Deleted namespace: {name}", data={"result": "deleted", "namespace": name})
        else:
            client.get_namespace_client(name)
            ctx.select_namespace(name)
            emit_result(ctx, message=f"Selected namespace: {name}", data={"result": "selected", "namespace": name})
        return 0
