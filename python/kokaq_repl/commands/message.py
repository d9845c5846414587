"""Message commands: enqueue, dequeue, ack, nack and peek."""

from __future__ import annotations

from typing import List, Tuple

from .base import Command, UsageError, selected_queue
from ..client import FailureReason, Message
from ..context import ShellContext
from ..output import emit_result, format_message, message_data

UINT64_MAX = 0xFFFFFFFFFFFFFFFF
RECEIVE_BATCH_SIZE = 1


def parse_priority(text: str) -> int:
    """Parse a base-10 unsigned 64-bit integer."""
    if not (text.isascii() and text.isdigit()):
        raise UsageError(f"invalid priority value '{text}'")
    value = int(text, 10)
    if value > UINT64_MAX:
        raise UsageError(f"invalid priority value '{text}': exceeds 64 bits")
    return value


def parse_enqueue(argv: List[str]) -> Tuple[str, int]:
    """``<word>... priority <uint64>`` -> (body, priority)."""
    if len(argv) < 3 or argv[-2] != "priority":
        raise UsageError("usage: enqueue <message> priority <uint64>")
    return " ".join(argv[:-2]), parse_priority(argv[-1])


def _parse_count(text: str, label: str, *, minimum: int) -> int:
    try:
        value = int(text, 10)
    except ValueError:
        raise UsageError(f"invalid {label} '{text}'") from None
    if value < minimum:
        raise UsageError(f"invalid {label} '{text}': must be >= {minimum}")
    return value


def _emit_messages(ctx: ShellContext, verb: str, messages: List[Message]) -> None:
    if not messages:
        emit_result(ctx, message="No message available", data={"messages": []})
        return
    for message in messages:
        emit_result(ctx, message=format_message(verb, message), data=message_data(message))


class EnqueueCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "enqueue",
            "Enqueue message with 64-bit priority",
            section="Message Commands",
            usage=(("enqueue <message> priority <n>", "Enqueue message with 64-bit priority"),),
        )

    def parse_args(self, argv: List[str]) -> Tuple[str, int]:
        return parse_enqueue(argv)

    def execute(self, ctx: ShellContext, args: Tuple[str, int]) -> int:
        body, priority = args
        message_id, _lock_id = selected_queue(ctx).sender().send(body.encode("utf-8"), priority)
        emit_result(
            ctx,
            message=f"Enqueued message: {message_id}, Priority: {priority}",
            data={"result": "enqueued", "message_id": message_id, "priority": priority},
        )
        return 0


class DequeueCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "dequeue",
            "Dequeue highest-priority message",
            section="Message Commands",
            usage=(("dequeue", "Dequeue highest-priority message"),),
        )

    def execute(self, ctx: ShellContext, args: None) -> int:
        received: List[Message] = []
        # Delivery is not acknowledged here; use ack/nack with the printed lock id.
        selected_queue(ctx).receiver().poll_and_process(RECEIVE_BATCH_SIZE, received.extend)
        _emit_messages(ctx, "Dequeued", received)
        return 0


class _SettleCommand(Command):
    """Shared argument handling for ack and nack."""

    def parse_args(self, argv: List[str]) -> Tuple[str, str]:
        if len(argv) != 2:
            raise UsageError(f"usage: {self.name} <message_id> <lock_id>")
        return argv[0], argv[1]


class AckCommand(_SettleCommand):
    def __init__(self) -> None:
        super().__init__(
            "ack",
            "Acknowledge successful message",
            section="Message Commands",
            usage=(("ack <messageID> <lockID>", "Acknowledge successful message"),),
        )

    def execute(self, ctx: ShellContext, args: Tuple[str, str]) -> int:
        message_id, lock_id = args
        selected_queue(ctx).receiver().ack(message_id, lock_id)
        emit_result(ctx, message="ack done", data={"result": "acked", "message_id": message_id})
        return 0


class NackCommand(_SettleCommand):
    def __init__(self) -> None:
        super().__init__(
            "nack",
            "Mark message as failed",
            section="Message Commands",
            usage=(("nack <messageID> <lockID>", "Mark message as failed"),),
        )

    def execute(self, ctx: ShellContext, args: Tuple[str, str]) -> int:
        message_id, lock_id = args
        selected_queue(ctx).receiver().nack(
            message_id,
            lock_id,
            FailureReason.PROCESSING_ERROR,
            allow_redelivery=True,
        )
        emit_result(ctx, message="nack done", data={"result": "nacked", "message_id": message_id})
        return 0


class PeekCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "peek",
            "Peek highest-priority message",
            section="Message Commands",
            usage=(("peek [count] [wait]", "Peek highest-priority message"),),
        )

    def parse_args(self, argv: List[str]) -> Tuple[int, int]:
        if len(argv) > 2:
            raise UsageError("usage: peek [count] [wait]")
        count = _parse_count(argv[0], "count", minimum=1) if argv else 1
        wait = _parse_count(argv[1], "wait", minimum=0) if len(argv) > 1 else 0
        return count, wait

    def execute(self, ctx: ShellContext, args: Tuple[int, int]) -> int:
        count, wait = args
        peeked: List[Message] = []
        selected_queue(ctx).receiver().peek_and_process(count, wait, lambda message, _lock: peeked.append(message))
        _emit_messages(ctx, "Peeked", peeked)
        return 0
