"""Request handling through the dispatcher and the server loop."""

from __future__ import annotations

import io
import json
from typing import Any, Dict, List

import pytest

from pydevkit.transport import LineProtocol
from pydev_server.commands import CommandRegistry, build_registry
from pydev_server.config import ServerConfig
from pydev_server.context import ServerContext
from pydev_server.dispatcher import Dispatcher, UNKNOWN_ERROR, error_result
from pydev_server.server import DevServer


def _serve(*requests: Any) -> List[Dict[str, Any]]:
    lines = [item if isinstance(item, str) else json.dumps(item) for item in requests]
    protocol = LineProtocol(io.StringIO("\n".join(lines) + "\n"), io.StringIO())
    server = DevServer(protocol, ServerConfig(banner=False, close_timeout=2.0))
    server.serve()
    return [json.loads(line) for line in protocol.writer.getvalue().splitlines()]


@pytest.fixture
def dispatcher():
    protocol = LineProtocol(io.StringIO(), io.StringIO())
    ctx = ServerContext(protocol=protocol, config=ServerConfig(banner=False, close_timeout=2.0))
    yield Dispatcher(ctx, build_registry())
    ctx.sessions.close_all()


def test_registry_resolves_names_and_aliases():
    registry = build_registry()
    assert registry.get("eval").name == "eval"
    assert registry.get("help") is registry.get("commands")
    assert registry.get("nope") is None
    assert isinstance(registry, CommandRegistry)


def test_unknown_query_type(dispatcher):
    assert dispatcher.dispatch({"type": "nope"}) == {
        "success": False,
        "error": "Unknown query type: nope",
        "backtrace": [],
    }
    assert dispatcher.dispatch({})["error"] == "Unknown query type: None"


def test_eval_returns_repr_and_keeps_state(dispatcher):
    first = dispatcher.dispatch({"type": "eval", "code": "x = 2\nx * 21", "filename": "t.py", "line": 1})
    assert first == {"success": True, "result": "42"}
    assert dispatcher.dispatch({"type": "eval", "code": "'s' + str(x)"})["result"] == "'s2'"


def test_eval_captures_output(dispatcher):
    result = dispatcher.dispatch({"type": "eval", "code": "print('hi')"})
    assert result == {"success": True, "result": "None", "output": "hi\n"}


def test_eval_errors_carry_backtrace(dispatcher):
    result = dispatcher.dispatch({"type": "eval", "code": "1/0", "filename": "t.py", "line": 3})
    assert result["success"] is False
    assert result["error"] == "ZeroDivisionError: division by zero"
    assert result["backtrace"][0] == "t.py:3:in <module>"
    assert any(frame.endswith(":in dispatch") for frame in result["backtrace"])


def test_eval_syntax_error_and_exit_are_contained(dispatcher):
    assert dispatcher.dispatch({"type": "eval", "code": "def ("})["error"].startswith("SyntaxError:")
    assert dispatcher.dispatch({"type": "eval", "code": "exit()"})["error"].startswith("SystemExit")
    assert dispatcher.dispatch({"type": "eval", "code": "1 + 1"})["result"] == "2"


def test_missing_fields_are_request_errors(dispatcher):
    result = dispatcher.dispatch({"type": "eval"})
    assert result["success"] is False
    assert result["error"] == "RequestError: request missing 'code'"
    result = dispatcher.dispatch({"type": "eval", "code": 5})
    assert result["error"].startswith("RequestError: 'code' must be a string")


def test_error_result_fallback():
    class Unprintable(Exception):
        def __str__(self):
            raise RuntimeError("no")

    assert error_result(Unprintable()) == {"success": False, "error": UNKNOWN_ERROR, "backtrace": []}


def test_search_doc(dispatcher):
    result = dispatcher.dispatch({"type": "search-doc", "input": "json.dum"})
    assert result["success"] is True
    assert "json.dumps" in result["completions"]


def test_object_info(dispatcher):
    assert dispatcher.dispatch({"type": "object-info", "symbol": "DoesNotExist123"}) == {
        "success": False,
        "error": "Can't find object: DoesNotExist123",
        "backtrace": [],
    }
    info = dispatcher.dispatch({"type": "object-info", "symbol": "json.dumps"})
    assert info["type"] == "method"
    assert info["language"] == "python"


def test_object_info_sees_evaluated_definitions(dispatcher):
    dispatcher.dispatch({"type": "eval", "code": "class A:\n    def f(self):\n        pass\n"})
    dispatcher.dispatch({"type": "eval", "code": "class B(A):\n    def g(self):\n        pass\n"})
    info = dispatcher.dispatch({"type": "object-info", "symbol": "B"})
    assert info["type"] == "class"
    assert info["superclass"] == "__pydev__.A"
    assert info["instance-methods"] == {"new": ["g"], "old": ["f"]}
    assert info["source"] is None


def test_commands_lists_sorted_names(dispatcher):
    result = dispatcher.dispatch({"type": "commands"})
    assert result["commands"] == sorted(result["commands"])
    assert {"eval", "repl-start", "repl-handle", "repl-stop", "repl-complete"} <= set(result["commands"])
    assert dispatcher.dispatch({"type": "help"})["commands"] == result["commands"]


def test_malformed_line_then_eval_yields_one_result():
    results = _serve("{broken", {"type": "eval", "code": "1 + 2"})
    assert results == [{"success": True, "result": "3"}]


def test_repl_round_trip():
    results = _serve(
        {"type": "repl-start", "id": "r1", "object": "[1, 2]"},
        {"type": "repl-handle", "id": "r1", "argument": ""},
        {"type": "repl-handle", "id": "r1", "argument": "print(len(self))"},
    )
    assert results[0] == {"success": True}
    assert results[1] == {"repl-id": "r1", "type": "read", "prompt": ">>> "}
    assert results[2] == {"success": True, "repl-id": "r1"}
    assert results[3:] == [
        {"repl-id": "r1", "type": "write", "string": "2"},
        {"repl-id": "r1", "type": "write", "string": "\n"},
        {"repl-id": "r1", "type": "read", "prompt": ">>> "},
        {"success": True, "repl-id": "r1"},
    ]


def test_repl_stop_is_idempotent_and_handle_after_stop_fails():
    results = _serve(
        {"type": "repl-start", "id": "r1", "object": "None"},
        {"type": "repl-handle", "id": "r1", "argument": ""},
        {"type": "repl-stop", "id": "r1"},
        {"type": "repl-stop", "id": "r1"},
        {"type": "repl-handle", "id": "r1", "argument": "1"},
    )
    assert results[-3:] == [
        {"success": True},
        {"success": True},
        {"success": False, "error": "No such REPL: r1", "backtrace": [], "repl-id": "r1"},
    ]


def test_repl_complete():
    results = _serve(
        {"type": "repl-start", "id": "c", "object": "'text'"},
        {"type": "repl-complete", "id": "c", "word": "self.upp"},
        {"type": "repl-complete", "id": "missing", "word": "x"},
    )
    assert results[1] == {"success": True, "completions": ["self.upper("]}
    assert results[2] == {"success": False, "error": "No such REPL: missing", "backtrace": []}


def test_repl_start_with_bad_expression():
    results = _serve({"type": "repl-start", "id": "r", "object": "undefined_name"})
    assert results[0]["success"] is False
    assert results[0]["error"].startswith("NameError:")


def test_session_exit_then_handle_reports_missing():
    results = _serve(
        {"type": "repl-start", "id": "r", "object": "None"},
        {"type": "repl-handle", "id": "r", "argument": ""},
        {"type": "repl-handle", "id": "r", "argument": "exit()"},
        {"type": "repl-handle", "id": "r", "argument": "1"},
    )
    assert results[-2] == {"success": True, "repl-id": "r"}
    assert results[-1]["error"] == "No such REPL: r"


def test_server_shutdown_closes_sessions():
    protocol = LineProtocol(
        io.StringIO(json.dumps({"type": "repl-start", "id": "a", "object": "None"}) + "\n"),
        io.StringIO(),
    )
    server = DevServer(protocol, ServerConfig(banner=False))
    server.serve()
    assert len(server.ctx.sessions) == 0
    assert server.handled == 1


def test_repl_complete_after_stop_and_after_exit():
    results = _serve(
        {"type": "repl-start", "id": "s", "object": "None"},
        {"type": "repl-stop", "id": "s"},
        {"type": "repl-complete", "id": "s", "word": "pri"},
        {"type": "repl-start", "id": "e", "object": "None"},
        {"type": "repl-handle", "id": "e", "argument": ""},
        {"type": "repl-handle", "id": "e", "argument": "exit()"},
        {"type": "repl-complete", "id": "e", "word": "pri"},
    )
    assert results[2] == {"success": False, "error": "No such REPL: s", "backtrace": []}
    assert results[-1] == {"success": False, "error": "No such REPL: e", "backtrace": []}


def test_commands_reports_session_ids(dispatcher):
    dispatcher.dispatch({"type": "repl-start", "id": "one", "object": "None"})
    assert dispatcher.dispatch({"type": "commands"})["sessions"] == ["one"]
    dispatcher.dispatch({"type": "repl-stop", "id": "one"})
    assert dispatcher.dispatch({"type": "commands"})["sessions"] == []


def test_shutdown_closes_the_transport():
    protocol = LineProtocol(io.StringIO(""), io.StringIO())
    DevServer(protocol, ServerConfig(banner=False)).serve()
    assert protocol.closed
