"""Process-wide state shared by command handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pydevkit.evaluator import Evaluator
from pydevkit.sessions import SessionRegistry
from pydevkit.transport import JsonDict, LineProtocol

from .config import ServerConfig

if TYPE_CHECKING:  # pragma: no cover
    from .commands import CommandRegistry


@dataclass
class ServerContext:
    """Holds the evaluator, the session registry and the client transport."""

    protocol: LineProtocol
    config: ServerConfig = field(default_factory=ServerConfig)
    evaluator: Evaluator = field(default_factory=Evaluator)
    sessions: Optional[SessionRegistry] = None
    commands: Optional["CommandRegistry"] = None

    def __post_init__(self) -> None:
        if self.sessions is None:
            self.sessions = SessionRegistry(
                close_timeout=self.config.close_timeout,
                banner=self.config.banner,
            )

    def write_result(self, result: JsonDict) -> None:
        """Send an out-of-band result line ahead of the command's own result."""
        self.protocol.write_result(result)
