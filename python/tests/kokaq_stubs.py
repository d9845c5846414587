"""In-memory stand-ins for the kokaq client used by the shell tests."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from kokaq_repl.client import ErrorKind, FailureReason, KokaqError, Message
from kokaq_repl.context import ShellContext


@dataclass
class FakeClient:
    """Records every call and serves namespaces/queues from dicts."""

    namespaces: Dict[str, List[str]] = field(default_factory=dict)
    pending: List[Message] = field(default_factory=list)
    calls: List[Tuple[Any, ...]] = field(default_factory=list)
    failures: Dict[str, KokaqError] = field(default_factory=dict)
    message_ids: Any = field(default_factory=lambda: (f"m-{idx}" for idx in itertools.count(1)))
    closed: bool = False

    def _record(self, op: str, *args: Any) -> None:
        self.calls.append((op, *args))
        failure = self.failures.get(op)
        if failure is not None:
            raise failure

    def _missing(self, what: str) -> KokaqError:
        return KokaqError(ErrorKind.NOT_FOUND, f"{what}: not found")

    def remote_ops(self) -> List[str]:
        return [call[0] for call in self.calls]

    def close(self) -> None:
        self.closed = True

    def create_namespace(self, namespace: str) -> str:
        self._record("create_namespace", namespace)
        if namespace in self.namespaces:
            raise KokaqError(ErrorKind.CONFLICT, f"create namespace: {namespace} already exists")
        self.namespaces[namespace] = []
        return namespace

    def get_namespace_client(self, namespace: str) -> "FakeNamespace":
        self._record("get_namespace", namespace)
        if namespace not in self.namespaces:
            raise self._missing("get namespace")
        return FakeNamespace(self, namespace)

    def list_namespaces(self) -> List[str]:
        self._record("list_namespaces")
        return list(self.namespaces)

    def create_queue(self, namespace: str, queue: str) -> "FakeQueue":
        self._record("create_queue", namespace, queue)
        self.namespaces.setdefault(namespace, []).append(queue)
        return FakeQueue(self, namespace, queue)

    def get_queue_client(self, namespace: str, queue: str) -> "FakeQueue":
        self._record("get_queue", namespace, queue)
        if queue not in self.namespaces.get(namespace, []):
            raise self._missing("get queue")
        return FakeQueue(self, namespace, queue)

    def list_queues(self, namespace: str) -> List[str]:
        self._record("list_queues", namespace)
        return list(self.namespaces.get(namespace, []))


@dataclass
class FakeNamespace:
    client: FakeClient
    namespace: str

    def delete(self) -> None:
        self.client._record("delete_namespace", self.namespace)
        self.client.namespaces.pop(self.namespace, None)


@dataclass
class FakeQueue:
    client: FakeClient
    namespace: str
    queue: str

    def sender(self) -> "FakeQueue":
        return self

    def receiver(self) -> "FakeQueue":
        return self

    def delete(self) -> None:
        self.client._record("delete_queue", self.namespace, self.queue)
        self.client.namespaces[self.namespace].remove(self.queue)

    def send(self, body: bytes, priority: int) -> Tuple[str, str]:
        self.client._record("send", body, priority)
        return next(self.client.message_ids), "lock-0"

    def poll_and_process(self, batch_size: int, callback) -> int:
        self.client._record("receive", batch_size)
        batch = self.client.pending[:batch_size]
        del self.client.pending[:batch_size]
        callback(batch)
        return len(batch)

    def ack(self, message_id: str, lock_id: str) -> None:
        self.client._record("ack", message_id, lock_id)

    def nack(self, message_id: str, lock_id: str, reason: FailureReason, allow_redelivery: bool = True) -> None:
        self.client._record("nack", message_id, lock_id, reason, allow_redelivery)

    def peek_and_process(self, count: int, wait: int, callback) -> int:
        self.client._record("peek", count, wait)
        for message in self.client.pending[:count]:
            callback(message, message.lock_id)
        return min(count, len(self.client.pending))


def make_context(
    client: Optional[FakeClient] = None,
    *,
    namespace: Optional[str] = None,
    queue: Optional[str] = None,
    json_output: bool = False,
) -> ShellContext:
    """Build a context wired to *client* with an optional selection."""
    fake = client or FakeClient()
    ctx = ShellContext(address=":9000", json_output=json_output, client_factory=lambda *_: fake)  # type: ignore[arg-type]
    ctx.connect()
    if namespace:
        fake.namespaces.setdefault(namespace, [])
        ctx.select_namespace(namespace)
        if queue:
            if queue not in fake.namespaces[namespace]:
                fake.namespaces[namespace].append(queue)
            ctx.select_queue(queue)
    return ctx
