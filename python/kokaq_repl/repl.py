"""Interactive REPL for the kokaq shell."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .commands import CommandRegistry
from .completion import ShellCompleter
from .context import ShellContext
from .output import emit_error
from .parser import parse_line

LOGGER = logging.getLogger("kokaq_repl.repl")

FAREWELL = "Exiting Kokaq REPL..."


class ShellInterrupted(KeyboardInterrupt):
    """Raised in the main thread when a termination signal arrives."""

    def __init__(self, signum: int) -> None:
        super().__init__(signum)
        self.signum = signum


class ShutdownSignal:
    """Single-slot stop flag set by SIGINT/SIGTERM.

    The first signal records itself and interrupts whatever the main thread
    is blocked on (the prompt or an in-flight request); later ones are
    ignored while the loop unwinds.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self) -> None:
        self._event = threading.Event()
        self.signum: Optional[int] = None
        self._previous: Dict[int, object] = {}

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def install(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            LOGGER.debug("not in main thread; signal handlers not installed")
            return
        for signum in self.SIGNALS:
            self._previous[signum] = signal.signal(signum, self._handle)

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)  # type: ignore[arg-type]
        self._previous.clear()

    def _handle(self, signum: int, _frame: object) -> None:
        if self._event.is_set():
            return
        self.signum = signum
        self._event.set()
        raise ShellInterrupted(signum)


class KokaqREPL:
    """prompt_toolkit REPL; reads plain lines when input is not a terminal."""

    def __init__(
        self,
        ctx: ShellContext,
        registry: CommandRegistry,
        *,
        history_path: Optional[Path] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history_path = history_path
        self.stream = stream
        self.shutdown = ShutdownSignal()

    def run(self) -> int:
        self.shutdown.install()
        try:
            return self._loop(self._line_reader())
        except KeyboardInterrupt:
            print(f"\n{FAREWELL}")
            return 0
        finally:
            self.shutdown.restore()
            self.ctx.disconnect()

    def _loop(self, read_line: Callable[[], Optional[str]]) -> int:
        while not self.shutdown.requested:
            line = read_line()
            if line is None:
                print()
                return 0
            self.dispatch(line)
        return 0

    def _line_reader(self) -> Callable[[], Optional[str]]:
        stream = self.stream
        if stream is None and sys.stdin.isatty():
            return self._prompt_reader()
        source = stream or sys.stdin

        def read_plain() -> Optional[str]:
            line = source.readline()
            return line if line else None

        return read_plain

    def _prompt_reader(self) -> Callable[[], Optional[str]]:
        history: History
        if self.history_path is not None:
            history = FileHistory(str(self.history_path.expanduser()))
        else:
            history = InMemoryHistory()
        session: PromptSession[str] = PromptSession(
            self.ctx.prompt_prefix,
            history=history,
            completer=ShellCompleter(self.registry),
            complete_while_typing=True,
        )

        def read_prompt() -> Optional[str]:
            try:
                with patch_stdout():
                    return session.prompt()
            except EOFError:
                return None

        return read_prompt

    def dispatch(self, line: str) -> int:
        parsed = parse_line(line)
        if parsed is None:
            return 0
        command = self.registry.get(parsed.kind)
        if command is None:
            emit_error(self.ctx, message=f"unknown command: {line.strip()}")
            return 1
        try:
            return command.run(self.ctx, parsed.args)
        except SystemExit:
            raise
        except Exception as exc:
            LOGGER.exception("command failed")
            emit_error(self.ctx, message=f"command '{parsed.name}' failed: {exc}")
            return 1
