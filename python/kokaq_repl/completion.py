"""prompt_toolkit completer for the kokaq shell."""

from __future__ import annotations

from typing import Dict, Iterable, List

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from .commands import CommandRegistry

SUBCOMMANDS: Dict[str, Dict[str, str]] = {
    "namespace": {
        "create": "Create a namespace",
        "delete": "Delete an existing namespace",
        "list": "List all namespaces",
        "use": "Set current namespace",
    },
    "queue": {
        "create": "Create a new queue in current namespace",
        "delete": "Delete a queue from current namespace",
        "list": "List queues in selected namespace",
        "use": "Set current queue",
    },
}


def _tokens(text: str) -> List[str]:
    tokens = text.split()
    if not text or text[-1].isspace():
        tokens.append("")
    return tokens


class ShellCompleter(Completer):
    """Completes verbs and the namespace/queue subcommands."""

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        tokens = _tokens(document.text_before_cursor)
        prefix = tokens[-1]
        if len(tokens) == 1:
            for command in self.registry.list_commands():
                if command.name.startswith(prefix):
                    yield Completion(command.name, start_position=-len(prefix), display_meta=command.description)
            return
        if len(tokens) == 2:
            for subcmd, meta in SUBCOMMANDS.get(tokens[0], {}).items():
                if subcmd.startswith(prefix):
                    yield Completion(subcmd, start_position=-len(prefix), display_meta=meta)
