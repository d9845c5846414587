"""Tests for the shell context selection rules."""

from __future__ import annotations

import pytest

from kokaq_repl.context import SelectionError, ShellContext
from kokaq_stubs import FakeClient


def test_new_context_has_empty_selection():
    ctx = ShellContext()
    assert ctx.current_namespace == ""
    assert ctx.current_queue == ""
    assert ctx.prompt_prefix() == "kokaq > "


def test_queue_requires_namespace():
    ctx = ShellContext()
    with pytest.raises(SelectionError):
        ctx.select_queue("orders")
    assert ctx.current_queue == ""


def test_switching_namespace_drops_queue():
    ctx = ShellContext()
    ctx.select_namespace("acct")
    ctx.select_queue("orders")
    assert ctx.prompt_prefix() == "kokaq [ns: acct] [q: orders] > "
    ctx.select_namespace("acct")
    assert ctx.current_queue == "orders"
    ctx.select_namespace("billing")
    assert ctx.current_namespace == "billing"
    assert ctx.current_queue == ""
    assert ctx.prompt_prefix() == "kokaq [ns: billing] > "


def test_forget_namespace_only_when_selected():
    ctx = ShellContext()
    ctx.select_namespace("acct")
    ctx.select_queue("orders")
    ctx.forget_namespace("other")
    assert (ctx.current_namespace, ctx.current_queue) == ("acct", "orders")
    ctx.forget_namespace("acct")
    assert (ctx.current_namespace, ctx.current_queue) == ("", "")


def test_forget_queue_only_when_selected():
    ctx = ShellContext()
    ctx.select_namespace("acct")
    ctx.select_queue("orders")
    ctx.forget_queue("refunds")
    assert ctx.current_queue == "orders"
    ctx.forget_queue("orders")
    assert ctx.current_queue == ""
    assert ctx.current_namespace == "acct"


def test_connect_and_disconnect_use_factory():
    created = []

    def factory(address, options):
        client = FakeClient()
        created.append((address, options, client))
        return client

    ctx = ShellContext(address="queue.local:9100", dial_timeout=1.5, client_factory=factory)
    client = ctx.ensure_client()
    assert ctx.ensure_client() is client
    address, options, _ = created[0]
    assert address == "queue.local:9100"
    assert options.dial_timeout == 1.5
    ctx.disconnect()
    assert client.closed
    assert ctx.client is None
    ctx.disconnect()


def test_ensure_client_redials_closed_connection():
    clients = []
    ctx = ShellContext(client_factory=lambda *_: clients.append(FakeClient()) or clients[-1])
    first = ctx.ensure_client()
    first.closed = True
    second = ctx.ensure_client()
    assert second is not first
    assert len(clients) == 2
