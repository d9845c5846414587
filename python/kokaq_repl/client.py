"""Client for the kokaq priority-queue service.

Speaks newline-delimited JSON over TCP.  Every request carries a numeric
``id`` and a ``cmd``; the server answers with the same ``id`` and a
``status`` of ``ok`` or ``error``.  Error replies carry a ``code`` which is
mapped onto :class:`ErrorKind` so callers can tell a missing queue from a
dropped connection without parsing text.
"""

from __future__ import annotations

import base64
import binascii
import enum
import json
import logging
import socket
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

LOGGER = logging.getLogger("kokaq_repl.client")

JsonDict = Dict[str, Any]

DEFAULT_HOST = "127.0.0.1"
DEFAULT_ADDRESS = ":9000"


class ErrorKind(enum.Enum):
    CONNECTION = "connection"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INTERNAL = "internal"


_CODE_KINDS = {
    "not_found": ErrorKind.NOT_FOUND,
    "already_exists": ErrorKind.CONFLICT,
    "conflict": ErrorKind.CONFLICT,
    "invalid_argument": ErrorKind.VALIDATION,
    "validation": ErrorKind.VALIDATION,
    "unavailable": ErrorKind.CONNECTION,
}


class KokaqError(RuntimeError):
    """Raised for every failed call against the queue service."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @classmethod
    def from_response(cls, response: JsonDict, context: str) -> "KokaqError":
        code = str(response.get("code") or "").lower()
        kind = _CODE_KINDS.get(code, ErrorKind.INTERNAL)
        detail = response.get("error") or code or "unknown error"
        return cls(kind, f"{context}: {detail}")


class FailureReason(enum.Enum):
    """Why a receiver gave a message back."""

    PROCESSING_ERROR = "PROCESSING_ERROR"
    INVALID_MESSAGE = "INVALID_MESSAGE"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True)
class Message:
    message_id: str
    lock_id: str
    priority: int
    body: bytes

    @classmethod
    def from_wire(cls, payload: JsonDict) -> "Message":
        raw_body = payload.get("body") or ""
        try:
            body = base64.b64decode(raw_body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise KokaqError(ErrorKind.INTERNAL, f"malformed message body: {exc}") from exc
        try:
            priority = int(payload.get("priority", 0))
        except (TypeError, ValueError) as exc:
            raise KokaqError(ErrorKind.INTERNAL, "malformed message priority") from exc
        return cls(
            message_id=str(payload.get("message_id", "")),
            lock_id=str(payload.get("lock_id", "")),
            priority=priority,
            body=body,
        )

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


ReceiveCallback = Callable[[List[Message]], None]
PeekCallback = Callable[[Message, str], None]


@dataclass
class KokaqClientOptions:
    dial_timeout: float = 5.0
    request_timeout: float = 10.0


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``:port``) into its parts."""
    text = (address or DEFAULT_ADDRESS).strip()
    host, sep, port_text = text.rpartition(":")
    if not sep:
        raise ValueError(f"address '{address}' is missing a port")
    host = host.strip("[]") or DEFAULT_HOST
    try:
        port = int(port_text, 10)
    except ValueError:
        raise ValueError(f"address '{address}' has an invalid port") from None
    if not 0 < port < 65536:
        raise ValueError(f"address '{address}' has an out-of-range port")
    return host, port


def _encode_body(body: bytes) -> str:
    return base64.b64encode(body).decode("ascii")


class KokaqClient:
    """Connection to a kokaq server.

    The socket is dialed in the constructor so that an unreachable server is
    reported before the shell starts reading commands.
    """

    def __init__(self, address: str, options: Optional[KokaqClientOptions] = None) -> None:
        self.address = address
        self.options = options or KokaqClientOptions()
        self.host, self.port = parse_address(address)
        self._lock = threading.Lock()
        self._next_id = 1
        self._sock: Optional[socket.socket] = None
        self._rfile: Any = None
        self._dial()

    def _dial(self) -> None:
        try:
            sock = socket.create_connection((self.host, self.port), timeout=self.options.dial_timeout)
        except OSError as exc:
            raise KokaqError(ErrorKind.CONNECTION, f"dial {self.host}:{self.port} failed: {exc}") from exc
        sock.settimeout(self.options.request_timeout)
        self._sock = sock
        self._rfile = sock.makefile("rb")
        LOGGER.debug("connected to %s:%s", self.host, self.port)

    @property
    def closed(self) -> bool:
        return self._sock is None

    def close(self) -> None:
        sock, rfile = self._sock, self._rfile
        self._sock = None
        self._rfile = None
        if rfile is not None:
            try:
                rfile.close()
            except OSError:
                pass
        if sock is not None:
            try:
                sock.close()
            except OSError as exc:
                LOGGER.debug("socket close failed: %s", exc)

    def __enter__(self) -> "KokaqClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # RPC plumbing
    # ------------------------------------------------------------------
    def call(self, cmd: str, context: str, **fields: Any) -> JsonDict:
        """Send one request and return the ``ok`` response."""
        with self._lock:
            if self._sock is None:
                raise KokaqError(ErrorKind.CONNECTION, f"{context}: connection closed")
            request_id = self._next_id
            self._next_id += 1
            payload: JsonDict = {"id": request_id, "cmd": cmd}
            payload.update(fields)
            LOGGER.debug("-> %s", payload)
            try:
                self._sock.sendall(json.dumps(payload, separators=(",", ":")).encode("utf-8") + b"\n")
                line = self._rfile.readline()
            except socket.timeout as exc:
                # A late reply would be read as the answer to the next request.
                self.close()
                raise KokaqError(ErrorKind.CONNECTION, f"{context}: request timed out") from exc
            except OSError as exc:
                self.close()
                raise KokaqError(ErrorKind.CONNECTION, f"{context}: {exc}") from exc
        if not line:
            self.close()
            raise KokaqError(ErrorKind.CONNECTION, f"{context}: connection closed by server")
        # After a framing error the stream is out of step; drop it.
        try:
            response = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.close()
            raise KokaqError(ErrorKind.CONNECTION, f"{context}: malformed response") from exc
        LOGGER.debug("<- %s", response)
        if not isinstance(response, dict):
            self.close()
            raise KokaqError(ErrorKind.CONNECTION, f"{context}: malformed response")
        if response.get("id") not in (None, request_id):
            self.close()
            raise KokaqError(ErrorKind.CONNECTION, f"{context}: response id mismatch")
        if response.get("status") != "ok":
            raise KokaqError.from_response(response, context)
        return response

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------
    def create_namespace(self, namespace: str) -> str:
        response = self.call("namespace.create", "create namespace", namespace=namespace)
        return str(response.get("namespace") or namespace)

    def get_namespace_client(self, namespace: str) -> "NamespaceClient":
        self.call("namespace.get", "get namespace", namespace=namespace)
        return NamespaceClient(self, namespace)

    def list_namespaces(self) -> List[str]:
        response = self.call("namespace.list", "list namespaces")
        return [str(name) for name in response.get("namespaces") or []]

    # ------------------------------------------------------------------
    # Queues
    # ------------------------------------------------------------------
    def create_queue(self, namespace: str, queue: str) -> "QueueClient":
        self.call("queue.create", "create queue", namespace=namespace, queue=queue)
        return QueueClient(self, namespace, queue)

    def get_queue_client(self, namespace: str, queue: str) -> "QueueClient":
        self.call("queue.get", "get queue", namespace=namespace, queue=queue)
        return QueueClient(self, namespace, queue)

    def list_queues(self, namespace: str) -> List[str]:
        response = self.call("queue.list", "list queues", namespace=namespace)
        return [str(name) for name in response.get("queues") or []]


class NamespaceClient:
    def __init__(self, client: KokaqClient, namespace: str) -> None:
        self.client = client
        self.namespace = namespace

    def delete(self) -> None:
        self.client.call("namespace.delete", "delete namespace", namespace=self.namespace)


class QueueClient:
    def __init__(self, client: KokaqClient, namespace: str, queue: str) -> None:
        self.client = client
        self.namespace = namespace
        self.queue = queue

    def delete(self) -> None:
        self.client.call("queue.delete", "delete queue", namespace=self.namespace, queue=self.queue)

    def sender(self) -> "Sender":
        return Sender(self)

    def receiver(self) -> "Receiver":
        return Receiver(self)

    def _call(self, cmd: str, context: str, **fields: Any) -> JsonDict:
        return self.client.call(cmd, context, namespace=self.namespace, queue=self.queue, **fields)


class Sender:
    def __init__(self, queue: QueueClient) -> None:
        self._queue = queue

    def send(self, body: bytes, priority: int) -> Tuple[str, str]:
        """Enqueue *body* and return ``(message_id, lock_id)``."""
        if not 0 <= priority <= 0xFFFFFFFFFFFFFFFF:
            raise KokaqError(ErrorKind.VALIDATION, "send: priority must fit in 64 unsigned bits")
        response = self._queue._call("message.send", "send", body=_encode_body(body), priority=priority)
        return str(response.get("message_id", "")), str(response.get("lock_id", ""))


class Receiver:
    def __init__(self, queue: QueueClient) -> None:
        self._queue = queue

    def poll_and_process(self, batch_size: int, callback: ReceiveCallback) -> int:
        """Receive up to *batch_size* messages and hand them to *callback*."""
        response = self._queue._call("message.receive", "receive", batch_size=int(batch_size))
        messages = [Message.from_wire(entry) for entry in response.get("messages") or [] if isinstance(entry, dict)]
        callback(messages)
        return len(messages)

    def ack(self, message_id: str, lock_id: str) -> None:
        self._queue._call("message.ack", "ack", message_id=message_id, lock_id=lock_id)

    def nack(
        self,
        message_id: str,
        lock_id: str,
        reason: FailureReason = FailureReason.PROCESSING_ERROR,
        allow_redelivery: bool = True,
    ) -> None:
        self._queue._call(
            "message.nack",
            "nack",
            message_id=message_id,
            lock_id=lock_id,
            reason=reason.value,
            allow_redelivery=bool(allow_redelivery),
        )

    def peek_and_process(self, count: int, wait: int, callback: PeekCallback) -> int:
        """Look at the head of the queue without consuming it."""
        response = self._queue._call("message.peek", "peek", count=int(count), wait=int(wait))
        messages = [Message.from_wire(entry) for entry in response.get("messages") or [] if isinstance(entry, dict)]
        for message in messages:
            callback(message, message.lock_id)
        return len(messages)


__all__ = [
    "DEFAULT_ADDRESS",
    "ErrorKind",
    "FailureReason",
    "KokaqClient",
    "KokaqClientOptions",
    "KokaqError",
    "Message",
    "NamespaceClient",
    "QueueClient",
    "Receiver",
    "Sender",
    "parse_address",
]
