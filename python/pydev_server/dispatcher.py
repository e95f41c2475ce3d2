"""Request dispatch and error conversion."""

from __future__ import annotations

import logging
import traceback
from typing import List

from pydevkit.transport import JsonDict

from .commands import CommandRegistry
from .context import ServerContext

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "(unknown error)"


def format_backtrace(exc: BaseException) -> List[str]:
    """Render the traceback of *exc* innermost frame first."""
    frames = traceback.extract_tb(exc.__traceback__)
    return [f"{frame.filename}:{frame.lineno}:in {frame.name}" for frame in reversed(frames)]


def error_result(exc: BaseException) -> JsonDict:
    try:
        return {
            "success": False,
            "error": f"{type(exc).__name__}: {exc}",
            "backtrace": format_backtrace(exc),
        }
    except Exception:
        logger.debug("failed to describe %s", type(exc).__name__, exc_info=True)
        return {"success": False, "error": UNKNOWN_ERROR, "backtrace": []}


class Dispatcher:
    """Routes requests to commands by their ``type`` field."""

    def __init__(self, ctx: ServerContext, registry: CommandRegistry) -> None:
        self.ctx = ctx
        self.registry = registry
        if ctx.commands is None:
            ctx.commands = registry

    def dispatch(self, request: JsonDict) -> JsonDict:
        query_type = request.get("type")
        command = self.registry.get(query_type) if isinstance(query_type, str) else None
        if command is None:
            logger.info("unknown query type: %r", query_type)
            return {"success": False, "error": f"Unknown query type: {query_type}", "backtrace": []}
        logger.debug("dispatching %s", command.name)
        try:
            return command.run(self.ctx, request)
        except (Exception, SystemExit) as exc:
            logger.debug("%s failed", command.name, exc_info=True)
            return error_result(exc)


__all__ = ["Dispatcher", "UNKNOWN_ERROR", "error_result", "format_backtrace"]
