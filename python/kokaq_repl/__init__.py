"""
kokaq-repl package.

Interactive shell for operating a kokaq priority-queue server: select a
namespace and queue, then send, receive, peek and settle messages.  Use
``kokaq-repl`` or ``python -m kokaq_repl`` to launch it.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
__version__ = "0.1.0"
