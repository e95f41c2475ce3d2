"""Registry of live console sessions keyed by client-chosen id."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .completion import complete_text
from .console import SessionConsole, SessionInput, SessionOutput
from .engine import Event, SessionEngine


logger = logging.getLogger(__name__)


@dataclass
class ReplSession:
    """One console session and the engine driving it."""

    id: str
    engine: SessionEngine
    console: SessionConsole
    input: SessionInput
    output: SessionOutput

    @property
    def alive(self) -> bool:
        return self.engine.alive

    def step(self, line: str) -> Iterator[Event]:
        return self.engine.step(line)

    def complete(self, word: str) -> List[str]:
        completer = self.input.completer
        if completer is None:
            return []
        return complete_text(completer, word)

    def close(self, timeout: float) -> bool:
        return self.engine.close(timeout)


class SessionRegistry:
    """Creates, looks up and destroys sessions.

    A session whose routine has finished stays registered until stopped, but
    lookups treat it as absent.
    """

    def __init__(self, *, close_timeout: float = 1.0, banner: bool = True) -> None:
        self.close_timeout = close_timeout
        self.banner = banner
        self._sessions: Dict[str, ReplSession] = {}
        self._lock = threading.RLock()

    def start(self, session_id: str, target: Any) -> ReplSession:
        """Register a new, not yet started session bound to *target*."""
        engine = SessionEngine(name=f"pydev-session-{session_id}")
        stdin = SessionInput(engine)
        stdout = SessionOutput(engine)
        console = SessionConsole(target, stdin, stdout, banner=None if self.banner else "")
        engine.bind(console.run, context_factory=console.redirect_streams)
        session = ReplSession(id=session_id, engine=engine, console=console, input=stdin, output=stdout)
        with self._lock:
            previous = self._sessions.get(session_id)
            self._sessions[session_id] = session
        if previous is not None:
            logger.info("replacing session %s", session_id)
            previous.close(self.close_timeout)
        logger.debug("session %s started on %s", session_id, type(target).__name__)
        return session

    def get(self, session_id: str) -> Optional[ReplSession]:
        """Return the live session for *session_id*, or None."""
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None or not session.alive:
            return None
        return session

    def handle(self, session_id: str, line: str) -> Optional[Iterator[Event]]:
        """Resume a session with *line*; None when there is no live session."""
        session = self.get(session_id)
        if session is None:
            return None
        return session.step(line)

    def complete(self, session_id: str, word: str) -> Optional[List[str]]:
        session = self.get(session_id)
        if session is None:
            return None
        return session.complete(word)

    def stop(self, session_id: str) -> bool:
        """Unregister and close a session.  Unknown ids are not an error."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close(self.close_timeout)
        logger.debug("session %s stopped", session_id)
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close(self.close_timeout)

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["ReplSession", "SessionRegistry"]
