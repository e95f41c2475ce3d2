"""
Line protocol transport for pydevkit.

Responsibilities:
    * Read one JSON object per line from the client's input stream.
    * Write one JSON object per line to the client's output stream.
    * Report (and drop) lines that do not decode to a JSON object.

Text and binary streams are both accepted; binary streams are decoded and
encoded as UTF-8.
"""

from __future__ import annotations

import io
import json
import logging
import threading
from typing import Any, Dict, Optional


JsonDict = Dict[str, Any]

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when the transport cannot complete an operation."""


class LineProtocol:
    """JSON-lines transport over a pair of streams (usually stdin/stdout)."""

    def __init__(self, reader, writer) -> None:
        self.reader = reader
        self.writer = writer
        self.dropped = 0
        self._write_lock = threading.Lock()
        self._closed = False

    def read_request(self) -> Optional[JsonDict]:
        """Return the next request object, or None on EOF."""
        while True:
            line = self.reader.readline()
            if not line:
                return None
            if isinstance(line, bytes):
                try:
                    line = line.decode("utf-8")
                except UnicodeDecodeError as exc:
                    self._drop(line, f"invalid UTF-8: {exc}")
                    continue
            decoded = line.strip()
            if not decoded:
                continue
            try:
                message = json.loads(decoded)
            except json.JSONDecodeError as exc:
                self._drop(decoded, f"{exc.__class__.__name__}: {exc}")
                continue
            if not isinstance(message, dict):
                self._drop(decoded, f"expected a JSON object, got {type(message).__name__}")
                continue
            return message

    def write_result(self, result: JsonDict) -> None:
        """Write *result* as a single JSON line and flush."""
        data = json.dumps(result, default=repr)
        with self._write_lock:
            if self._closed:
                raise TransportError("transport closed")
            if _is_binary(self.writer):
                self.writer.write(data.encode("utf-8") + b"\n")
            else:
                self.writer.write(data + "\n")
            self.writer.flush()

    def close(self) -> None:
        with self._write_lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _drop(self, line: Any, reason: str) -> None:
        self.dropped += 1
        preview = line if len(line) <= 120 else line[:117] + "..."
        logger.warning("dropping malformed request (%s): %r", reason, preview)


def _is_binary(stream) -> bool:
    return isinstance(stream, (io.RawIOBase, io.BufferedIOBase))


__all__ = ["JsonDict", "LineProtocol", "TransportError"]
