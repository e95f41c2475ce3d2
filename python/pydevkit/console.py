"""Interactive console backend driven through a SessionEngine."""

from __future__ import annotations

import code
import contextlib
import io
import reprlib
import sys
import types
from typing import Any, Dict, Iterable, Iterator, Optional

from prompt_toolkit.completion import Completer

from .completion import NamespaceCompleter
from .engine import SessionEngine


class SessionInput:
    """stdin replacement whose reads suspend the session until the client answers."""

    encoding = "utf-8"
    errors = "strict"

    def __init__(self, engine: SessionEngine) -> None:
        self.engine = engine
        self.completer: Optional[Completer] = None

    def read_line(self, prompt: str = "") -> str:
        return self.engine.request_read(prompt)

    def readline(self, size: int = -1) -> str:
        # input() strips the newline and treats "" as EOF.
        return self.read_line("") + "\n"

    def isatty(self) -> bool:
        return False

    def fileno(self) -> int:
        raise io.UnsupportedOperation("session input has no file descriptor")

    def close(self) -> None:
        # exit()/quit() close sys.stdin before raising SystemExit.
        pass

    @property
    def closed(self) -> bool:
        return False


class SessionOutput:
    """stdout/stderr replacement; every write becomes a write event."""

    encoding = "utf-8"
    errors = "strict"

    def __init__(self, engine: SessionEngine) -> None:
        self.engine = engine

    def write(self, data: Any) -> int:
        text = data if isinstance(data, str) else str(data)
        if not text:
            return 0
        if self.engine.on_worker:
            self.engine.request_write(text)
        elif sys.__stderr__ is not None:
            # threads started by user code cannot suspend the session
            sys.__stderr__.write(text)
        return len(text)

    def writelines(self, lines: Iterable[Any]) -> None:
        for line in lines:
            self.write(line)

    def print(self, *values: Any) -> None:
        self.write(" ".join(str(value) for value in values) + "\n")

    def flush(self) -> None:
        pass

    def isatty(self) -> bool:
        return False

    def fileno(self) -> int:
        raise io.UnsupportedOperation("session output has no file descriptor")

    @property
    def closed(self) -> bool:
        return False


def namespace_for(target: Any) -> Dict[str, Any]:
    """Return the namespace a console bound to *target* evaluates in."""
    if isinstance(target, types.ModuleType):
        return vars(target)
    return {"__name__": "__console__", "__doc__": None, "self": target}


def default_banner(target: Any) -> str:
    version = sys.version.split()[0]
    return (
        f"Python {version} session on {type(target).__name__} {reprlib.repr(target)}\n"
        'Type "exit()" to end the session.'
    )


class SessionConsole(code.InteractiveConsole):
    """InteractiveConsole whose console I/O goes through session adapters."""

    ps1 = ">>> "
    ps2 = "... "

    def __init__(
        self,
        target: Any,
        stdin: SessionInput,
        stdout: SessionOutput,
        *,
        banner: Optional[str] = None,
        filename: str = "<pydev>",
    ) -> None:
        super().__init__(locals=namespace_for(target), filename=filename)
        self.target = target
        self.stdin = stdin
        self.stdout = stdout
        self.banner = default_banner(target) if banner is None else banner
        stdin.completer = NamespaceCompleter(self.locals)

    def raw_input(self, prompt: str = "") -> str:
        return self.stdin.read_line(prompt)

    def write(self, data: str) -> None:
        self.stdout.write(data)

    def run(self) -> None:
        """Top-level loop: banner, then read/push until exit or EOF."""
        if self.banner:
            self.stdout.print(self.banner)
        more = False
        while True:
            try:
                line = self.raw_input(self.ps2 if more else self.ps1)
            except EOFError:
                self.write("\n")
                return
            try:
                more = self.push(line)
            except SystemExit:
                return
            except KeyboardInterrupt:
                self.write("\nKeyboardInterrupt\n")
                self.resetbuffer()
                more = False

    @contextlib.contextmanager
    def redirect_streams(self) -> Iterator["SessionConsole"]:
        """Route sys.stdin/stdout/stderr through the session while it runs."""
        saved = sys.stdin, sys.stdout, sys.stderr, sys.displayhook
        sys.stdin = self.stdin
        sys.stdout = self.stdout
        sys.stderr = self.stdout
        sys.displayhook = sys.__displayhook__
        try:
            yield self
        finally:
            sys.stdin, sys.stdout, sys.stderr, sys.displayhook = saved


__all__ = [
    "SessionConsole",
    "SessionInput",
    "SessionOutput",
    "default_banner",
    "namespace_for",
]
