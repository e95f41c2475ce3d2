"""Command base classes for the pydev server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from pydevkit.transport import JsonDict

from ..context import ServerContext


class RequestError(RuntimeError):
    """Raised when a request is missing or has malformed fields."""


@dataclass
class Command:
    """Abstract command description."""

    name: str
    description: str
    aliases: Sequence[str] = field(default_factory=tuple)

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        raise NotImplementedError("Command must implement run()")

    def format_help(self) -> str:
        return f"{self.name:<14} {self.description}"

    @staticmethod
    def require(request: JsonDict, key: str) -> Any:
        if key not in request:
            raise RequestError(f"request missing '{key}'")
        return request[key]

    @classmethod
    def require_str(cls, request: JsonDict, key: str) -> str:
        value = cls.require(request, key)
        if not isinstance(value, str):
            raise RequestError(f"'{key}' must be a string, got {type(value).__name__}")
        return value
