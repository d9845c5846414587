"""Input line parsing for the kokaq shell."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional


class CommandKind(enum.Enum):
    NAMESPACE = "namespace"
    QUEUE = "queue"
    ENQUEUE = "enqueue"
    DEQUEUE = "dequeue"
    ACK = "ack"
    NACK = "nack"
    PEEK = "peek"
    HELP = "help"
    EXIT = "exit"

    @classmethod
    def lookup(cls, verb: str) -> Optional["CommandKind"]:
        try:
            return cls(verb)
        except ValueError:
            return None


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    args: List[str]
    kind: Optional[CommandKind]


def split_command(line: str) -> List[str]:
    """Split on runs of whitespace.  Quotes have no special meaning."""
    if not line:
        return []
    return line.split()


def parse_line(line: str) -> Optional[ParsedCommand]:
    """Return the verb and its arguments, or ``None`` for a blank line."""
    argv = split_command(line)
    if not argv:
        return None
    name, *args = argv
    return ParsedCommand(name=name, args=args, kind=CommandKind.lookup(name))
