"""
pydevkit - toolkit behind the pydev editor bridge.

Each module is implemented in its own file to keep responsibilities clear:

    transport.py   -> JSON-lines framing over a pair of streams
    engine.py      -> resumable session engine (read/write events)
    console.py     -> interactive console backend and its stdio adapters
    completion.py  -> namespace completion for console sessions
    sessions.py    -> registry of live sessions keyed by id
    evaluator.py   -> evaluation in a persistent top-level namespace
    introspect.py  -> symbol search and object metadata
    docparse.py    -> docstring tag parsing
"""

from .transport import LineProtocol, TransportError  # noqa: F401
from .engine import (  # noqa: F401
    EngineError,
    EngineState,
    EngineTerminated,
    ReadEvent,
    SessionCancelled,
    SessionEngine,
    WriteEvent,
)
from .console import SessionConsole, SessionInput, SessionOutput  # noqa: F401
from .completion import NamespaceCompleter  # noqa: F401
from .sessions import ReplSession, SessionRegistry  # noqa: F401
from .evaluator import Evaluation, Evaluator  # noqa: F401
from .introspect import object_info, search_symbols  # noqa: F401
from .docparse import parse_doc  # noqa: F401

__all__ = [
    "LineProtocol",
    "TransportError",
    "EngineError",
    "EngineState",
    "EngineTerminated",
    "ReadEvent",
    "SessionCancelled",
    "SessionEngine",
    "WriteEvent",
    "SessionConsole",
    "SessionInput",
    "SessionOutput",
    "NamespaceCompleter",
    "ReplSession",
    "SessionRegistry",
    "Evaluation",
    "Evaluator",
    "object_info",
    "search_symbols",
    "parse_doc",
]

__version__ = "0.1.0"
