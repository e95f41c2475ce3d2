"""Documentation lookup commands."""

from __future__ import annotations

from pydevkit.introspect import object_info, search_symbols
from pydevkit.transport import JsonDict

from .base import Command
from ..context import ServerContext


class SearchDocCommand(Command):
    def __init__(self) -> None:
        super().__init__("search-doc", "List symbols starting with a prefix")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        prefix = self.require_str(request, "input")
        completions = list(search_symbols(prefix, ctx.evaluator.namespace))
        return {"success": True, "completions": completions}


class ObjectInfoCommand(Command):
    def __init__(self) -> None:
        super().__init__("object-info", "Describe a class, module or callable")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        symbol = self.require_str(request, "symbol")
        info = object_info(symbol, ctx.evaluator.namespace)
        if info is None:
            return {"success": False, "error": f"Can't find object: {symbol}", "backtrace": []}
        return info
