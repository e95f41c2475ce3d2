"""Console session commands."""

from __future__ import annotations

from pydevkit.engine import ReadEvent, WriteEvent
from pydevkit.transport import JsonDict

from .base import Command
from ..context import ServerContext


def _missing(session_id: str) -> JsonDict:
    return {"success": False, "error": f"No such REPL: {session_id}", "backtrace": []}


class ReplStartCommand(Command):
    def __init__(self) -> None:
        super().__init__("repl-start", "Start a console session on an object")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        session_id = self.require_str(request, "id")
        expression = self.require_str(request, "object")
        target = ctx.evaluator.capture(expression, "(repl-start)").value
        ctx.sessions.start(session_id, target)
        return {"success": True}


class ReplHandleCommand(Command):
    def __init__(self) -> None:
        super().__init__("repl-handle", "Feed one line of input to a session")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        session_id = self.require_str(request, "id")
        line = self.require_str(request, "argument")
        events = ctx.sessions.handle(session_id, line)
        if events is None:
            result = _missing(session_id)
            result["repl-id"] = session_id
            return result
        for event in events:
            if isinstance(event, WriteEvent):
                ctx.write_result({"repl-id": session_id, "type": "write", "string": event.text})
            elif isinstance(event, ReadEvent):
                ctx.write_result({"repl-id": session_id, "type": "read", "prompt": event.prompt})
        return {"success": True, "repl-id": session_id}


class ReplStopCommand(Command):
    def __init__(self) -> None:
        super().__init__("repl-stop", "Stop a console session")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        ctx.sessions.stop(self.require_str(request, "id"))
        return {"success": True}


class ReplCompleteCommand(Command):
    def __init__(self) -> None:
        super().__init__("repl-complete", "Complete a word in a session's namespace")

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        session_id = self.require_str(request, "id")
        word = self.require_str(request, "word")
        completions = ctx.sessions.complete(session_id, word)
        if completions is None:
            return _missing(session_id)
        return {"success": True, "completions": completions}
