"""Output helpers for the kokaq shell."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Mapping, Optional

from .client import Message
from .context import ShellContext


def _json_dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def emit_result(ctx: ShellContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit a successful command result."""
    if ctx.json_output:
        payload: Dict[str, Any] = {"status": "ok"}
        if data is not None:
            payload["result"] = data
        else:
            payload["message"] = message
        print(_json_dump(payload))
    else:
        print(message)


def emit_error(ctx: ShellContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an error message respecting JSON mode."""
    payload: Dict[str, Any] = {"status": "error", "error": message}
    if data:
        payload["details"] = dict(data)
    if ctx.json_output:
        print(_json_dump(payload))
    else:
        print(f"error: {message}")


def message_data(message: Message) -> Dict[str, Any]:
    return {
        "message_id": message.message_id,
        "lock_id": message.lock_id,
        "priority": message.priority,
        "body": message.text(),
    }


def format_message(verb: str, message: Message) -> str:
    line = f"{verb} message: {message.message_id}, Priority: {message.priority}"
    if message.lock_id:
        line += f", Lock: {message.lock_id}"
    if message.body:
        line += f", Body: {message.text()}"
    return line


def format_names(label: str, names: Iterable[str]) -> str:
    entries = sorted(names)
    return f"{label}: {', '.join(entries) if entries else '(none)'}"


__all__ = [
    "emit_result",
    "emit_error",
    "format_message",
    "format_names",
    "message_data",
]
