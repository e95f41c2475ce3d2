"""Eval command."""

from __future__ import annotations

from pydevkit.transport import JsonDict

from .base import Command, RequestError
from ..context import ServerContext


class EvalCommand(Command):
    def __init__(self) -> None:
        super().__init__("eval", "Evaluate code in the top-level namespace")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        source = self.require_str(request, "code")
        filename = request.get("filename")
        line = request.get("line")
        if line is not None and not isinstance(line, int):
            raise RequestError(f"'line' must be an integer, got {type(line).__name__}")
        evaluation = ctx.evaluator.capture(source, filename, line)
        result: JsonDict = {"success": True, "result": repr(evaluation.value)}
        if evaluation.output:
            result["output"] = evaluation.output
        return result
