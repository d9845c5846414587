"""Selection requirements checked before a command runs."""

from __future__ import annotations

import enum
from typing import Dict, Optional

from .context import ShellContext
from .parser import CommandKind


class Requirement(enum.Enum):
    NONE = "none"
    NAMESPACE = "namespace"
    NAMESPACE_AND_QUEUE = "namespace+queue"


REQUIREMENTS: Dict[CommandKind, Requirement] = {
    CommandKind.NAMESPACE: Requirement.NONE,
    CommandKind.QUEUE: Requirement.NAMESPACE,
    CommandKind.ENQUEUE: Requirement.NAMESPACE_AND_QUEUE,
    CommandKind.DEQUEUE: Requirement.NAMESPACE_AND_QUEUE,
    CommandKind.ACK: Requirement.NAMESPACE_AND_QUEUE,
    CommandKind.NACK: Requirement.NAMESPACE_AND_QUEUE,
    CommandKind.PEEK: Requirement.NAMESPACE_AND_QUEUE,
    CommandKind.HELP: Requirement.NONE,
    CommandKind.EXIT: Requirement.NONE,
}

NAMESPACE_HINT = "Set namespace first using 'namespace use'"
QUEUE_HINT = "Set namespace and queue first using 'namespace use' and 'queue use'"


def check_preconditions(kind: CommandKind, ctx: ShellContext) -> Optional[str]:
    """Return a hint when *ctx* lacks the selection *kind* needs, else ``None``."""
    requirement = REQUIREMENTS[kind]
    if requirement is Requirement.NONE:
        return None
    if requirement is Requirement.NAMESPACE:
        return None if ctx.current_namespace else NAMESPACE_HINT
    if ctx.current_namespace and ctx.current_queue:
        return None
    return QUEUE_HINT
