"""
Cooperative session engine.

A backend routine written against a blocking console (read a line, write
some text) runs on a dedicated worker thread.  Its reads and writes never
touch a real console: each one hands an event to the resumer and parks the
worker until the resumer hands a value back, which becomes the return value
of the blocked call.  The worker therefore only executes while a ``resume``
call is waiting on it, and the caller decides when the backend advances.

Worker and resumer talk through two single-slot queues:

    inbox   resumer -> backend   next input line (or the cancel marker)
    outbox  backend -> resumer   ReadEvent / WriteEvent / finish marker
"""

from __future__ import annotations

import contextlib
import enum
import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Iterator, Optional, Union


logger = logging.getLogger(__name__)

Routine = Callable[[], Any]


class EngineError(RuntimeError):
    """Raised when the engine is driven incorrectly."""


class EngineTerminated(EngineError):
    """Raised when resuming an engine whose routine has finished."""


class SessionCancelled(BaseException):
    """Raised inside the backend when its engine is closed.

    Derives from BaseException so ``except Exception`` blocks in user code
    do not stop the unwind.
    """


class EngineState(enum.Enum):
    SUSPENDED = "suspended"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class ReadEvent:
    prompt: str = ""


@dataclass(frozen=True)
class WriteEvent:
    text: str


Event = Union[ReadEvent, WriteEvent]


@dataclass(frozen=True)
class _Finished:
    error: Optional[BaseException] = None


_CANCEL = object()


class SessionEngine:
    """Runs one backend routine as a resumable unit of work."""

    def __init__(
        self,
        routine: Optional[Routine] = None,
        *,
        name: str = "pydev-session",
        context_factory: Optional[Callable[[], ContextManager[Any]]] = None,
    ) -> None:
        self.name = name
        self._routine = routine
        self._context_factory = context_factory or contextlib.nullcontext
        self._state = EngineState.SUSPENDED
        self._thread: Optional[threading.Thread] = None
        self._inbox: "queue.Queue[Any]" = queue.Queue(maxsize=1)
        self._outbox: "queue.Queue[Any]" = queue.Queue(maxsize=1)
        self._resume_lock = threading.Lock()
        self._cancelled = False

    # ------------------------------------------------------------------
    # Resumer side
    # ------------------------------------------------------------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def alive(self) -> bool:
        return self._state is not EngineState.TERMINATED

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def on_worker(self) -> bool:
        """True when called from the thread running the routine."""
        return self._thread is not None and threading.current_thread() is self._thread

    def bind(
        self,
        routine: Routine,
        *,
        context_factory: Optional[Callable[[], ContextManager[Any]]] = None,
    ) -> None:
        """Attach the routine (and the context each resume runs under)."""
        if self._thread is not None:
            raise EngineError(f"{self.name} already started")
        self._routine = routine
        if context_factory is not None:
            self._context_factory = context_factory

    def resume(self, value: Any = None) -> Optional[Event]:
        """Advance the routine to its next read or write.

        The first call starts the routine and *value* is discarded.  Later
        calls deliver *value* as the result of the pending read (a pending
        write ignores it).  Returns None once the routine has returned.
        """
        with self._resume_lock:
            if self._state is EngineState.TERMINATED:
                raise EngineTerminated(f"{self.name} has terminated")
            with self._context_factory():
                if self._thread is None:
                    if self._routine is None:
                        raise EngineError(f"{self.name} has no routine bound")
                    self._thread = threading.Thread(target=self._worker, name=self.name, daemon=True)
                    self._state = EngineState.RUNNING
                    self._thread.start()
                else:
                    self._state = EngineState.RUNNING
                    self._inbox.put(value)
                message = self._outbox.get()
            return self._receive(message)

    def step(self, line: str) -> Iterator[Event]:
        """Resume with *line*; yield every write, then the next read if any."""
        if self._state is EngineState.RUNNING:
            # A previous step was abandoned while paused at a write.
            event = self.resume(None)
            while isinstance(event, WriteEvent):
                yield event
                event = self.resume(None)
            if event is None:
                return
        event = self.resume(line)
        while isinstance(event, WriteEvent):
            yield event
            event = self.resume(None)
        if event is not None:
            yield event

    def close(self, timeout: float = 1.0) -> bool:
        """Cancel the routine and wait up to *timeout* seconds for it to unwind.

        Returns False when the worker did not finish in time; it is then left
        behind as a daemon thread.
        """
        with self._resume_lock:
            if self._state is EngineState.TERMINATED:
                return True
            if self._thread is None:
                self._state = EngineState.TERMINATED
                return True
            with self._context_factory():
                return self._cancel(timeout)

    def _cancel(self, timeout: float) -> bool:
        self._inbox.put(_CANCEL)
        deadline = time.monotonic() + max(0.0, timeout)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                message = self._outbox.get(timeout=remaining)
            except queue.Empty:
                break
            if isinstance(message, _Finished):
                self._state = EngineState.TERMINATED
                if message.error is not None:
                    logger.debug("%s raised while closing: %r", self.name, message.error)
                self._thread.join(timeout=max(0.0, deadline - time.monotonic()))
                return True
            self._inbox.put(_CANCEL)
        self._state = EngineState.TERMINATED
        logger.warning("%s did not stop within %.2fs; abandoning worker thread", self.name, timeout)
        return False

    def _receive(self, message: Any) -> Optional[Event]:
        if isinstance(message, _Finished):
            self._state = EngineState.TERMINATED
            logger.debug("%s finished", self.name)
            if message.error is not None:
                raise message.error
            return None
        if isinstance(message, ReadEvent):
            self._state = EngineState.SUSPENDED
        return message

    # ------------------------------------------------------------------
    # Backend side (worker thread only)
    # ------------------------------------------------------------------
    def request_read(self, prompt: str = "") -> str:
        """Block the backend until the resumer supplies the next line."""
        value = self._suspend(ReadEvent(str(prompt)))
        return "" if value is None else str(value)

    def request_write(self, text: str) -> None:
        """Hand *text* to the resumer and wait to be resumed."""
        self._suspend(WriteEvent(text))

    def _suspend(self, event: Event) -> Any:
        if not self.on_worker:
            raise EngineError(f"{self.name}: console I/O outside the session thread")
        if self._cancelled:
            raise SessionCancelled(self.name)
        self._outbox.put(event)
        value = self._inbox.get()
        if value is _CANCEL:
            self._cancelled = True
            raise SessionCancelled(self.name)
        return value

    def _worker(self) -> None:
        outcome = _Finished()
        routine = self._routine
        try:
            routine()
        except SessionCancelled:
            logger.debug("%s cancelled", self.name)
        except BaseException as exc:  # surfaced to the resumer
            outcome = _Finished(exc)
        self._outbox.put(outcome)


__all__ = [
    "EngineError",
    "EngineState",
    "EngineTerminated",
    "Event",
    "ReadEvent",
    "SessionCancelled",
    "SessionEngine",
    "WriteEvent",
]
