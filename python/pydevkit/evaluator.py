"""Code evaluation in a persistent top-level namespace."""

from __future__ import annotations

import ast
import builtins
import contextlib
import io
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_FILENAME = "(eval)"


@dataclass
class Evaluation:
    value: Any
    output: str = ""


class Evaluator:
    """Runs client-supplied source against shared process state.

    Statements execute in order; when the last statement is an expression
    its value is returned, otherwise None.  Definitions persist between
    calls.
    """

    def __init__(self, namespace: Optional[Dict[str, Any]] = None) -> None:
        if namespace is None:
            namespace = {"__name__": "__pydev__", "__builtins__": builtins}
        self.namespace = namespace

    def evaluate(self, source: str, filename: Optional[str] = None, line: Optional[int] = None) -> Any:
        filename = filename or DEFAULT_FILENAME
        tree = ast.parse(source, filename=filename, mode="exec")
        if line is not None and int(line) > 1:
            ast.increment_lineno(tree, int(line) - 1)
        last: Optional[ast.Expression] = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last = ast.Expression(tree.body.pop().value)
        if tree.body:
            exec(compile(tree, filename, "exec"), self.namespace)
        if last is None:
            return None
        return eval(compile(last, filename, "eval"), self.namespace)

    def capture(self, source: str, filename: Optional[str] = None, line: Optional[int] = None) -> Evaluation:
        """Evaluate with stdio detached from the process streams.

        Output is collected instead of reaching the protocol stream, and
        stdin is an empty buffer so exit()/input() cannot touch the real one.
        """
        buffer = io.StringIO()
        saved_stdin = sys.stdin
        with contextlib.redirect_stdout(buffer), contextlib.redirect_stderr(buffer):
            sys.stdin = io.StringIO()
            try:
                value = self.evaluate(source, filename, line)
            finally:
                sys.stdin = saved_stdin
        return Evaluation(value=value, output=buffer.getvalue())


__all__ = ["DEFAULT_FILENAME", "Evaluation", "Evaluator"]
