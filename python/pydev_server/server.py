"""Main request loop for the pydev server."""

from __future__ import annotations

import logging

from pydevkit.transport import LineProtocol

from .commands import CommandRegistry, build_registry
from .config import ServerConfig
from .context import ServerContext
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class DevServer:
    """Reads requests until end of input and answers each with one result line."""

    def __init__(
        self,
        protocol: LineProtocol,
        config: ServerConfig | None = None,
        registry: CommandRegistry | None = None,
    ) -> None:
        self.protocol = protocol
        self.config = config or ServerConfig()
        self.registry = registry or build_registry()
        self.ctx = ServerContext(protocol=protocol, config=self.config, commands=self.registry)
        self.dispatcher = Dispatcher(self.ctx, self.registry)
        self.handled = 0

    def serve(self) -> None:
        while True:
            request = self.protocol.read_request()
            if request is None:
                logger.info("EOF on input, shutting down")
                break
            self.handle(request)
        self.shutdown()

    def handle(self, request: dict) -> None:
        result = self.dispatcher.dispatch(request)
        self.protocol.write_result(result)
        self.handled += 1

    def shutdown(self) -> None:
        self.ctx.sessions.close_all()
        self.protocol.close()
        logger.info(
            "handled %d request(s), dropped %d malformed line(s)",
            self.handled,
            self.protocol.dropped,
        )


__all__ = ["DevServer"]
