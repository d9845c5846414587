"""Shell context: connection target, selected namespace/queue and client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .client import DEFAULT_ADDRESS, KokaqClient, KokaqClientOptions

LOGGER = logging.getLogger("kokaq_repl.context")

ClientFactory = Callable[[str, KokaqClientOptions], KokaqClient]


class SelectionError(RuntimeError):
    """Raised when a queue is selected without a namespace."""


@dataclass(frozen=True)
class Selection:
    namespace: str
    queue: Optional[str] = None


@dataclass
class ShellContext:
    """Holds shared shell state for the REPL and its commands."""

    address: str = DEFAULT_ADDRESS
    json_output: bool = False
    dial_timeout: float = 5.0
    request_timeout: float = 10.0
    client_factory: Optional[ClientFactory] = field(default=None, repr=False)
    selection: Optional[Selection] = field(default=None, init=False)
    _client: Optional[KokaqClient] = field(default=None, init=False, repr=False)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def current_namespace(self) -> str:
        return self.selection.namespace if self.selection else ""

    @property
    def current_queue(self) -> str:
        if self.selection and self.selection.queue:
            return self.selection.queue
        return ""

    def select_namespace(self, namespace: str) -> None:
        if self.selection and self.selection.namespace == namespace:
            return
        self.selection = Selection(namespace)

    def select_queue(self, queue: str) -> None:
        if not self.selection:
            raise SelectionError("no namespace selected")
        self.selection = Selection(self.selection.namespace, queue)

    def forget_namespace(self, namespace: str) -> None:
        """Drop the selection if *namespace* is the selected one."""
        if self.selection and self.selection.namespace == namespace:
            self.selection = None

    def forget_queue(self, queue: str) -> None:
        if self.selection and self.selection.queue == queue:
            self.selection = Selection(self.selection.namespace)

    def prompt_prefix(self) -> str:
        if self.current_namespace and self.current_queue:
            return f"kokaq [ns: {self.current_namespace}] [q: {self.current_queue}] > "
        if self.current_namespace:
            return f"kokaq [ns: {self.current_namespace}] > "
        return "kokaq > "

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------
    @property
    def client(self) -> Optional[KokaqClient]:
        return self._client

    def connect(self) -> KokaqClient:
        """Dial the server, replacing any previous connection."""
        self.disconnect()
        options = KokaqClientOptions(dial_timeout=self.dial_timeout, request_timeout=self.request_timeout)
        factory = self.client_factory or KokaqClient
        self._client = factory(self.address, options)
        LOGGER.info("connected to %s", self.address)
        return self._client

    def ensure_client(self) -> KokaqClient:
        client = self._client
        if client is not None and not client.closed:
            return client
        return self.connect()

    def disconnect(self) -> None:
        client = self._client
        if client is None:
            return
        self._client = None
        try:
            client.close()
        except OSError as exc:
            LOGGER.debug("client close failed: %s", exc)
