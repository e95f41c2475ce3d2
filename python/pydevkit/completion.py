"""prompt_toolkit completer for console sessions."""

from __future__ import annotations

import contextlib
import io
import re
import rlcompleter
from typing import Any, Dict, Iterable, List

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

_WORD_BEFORE_CURSOR = re.compile(r"[\w.]*$")
MAX_CANDIDATES = 256


class NamespaceCompleter(Completer):
    """Completes names and dotted attributes against a console namespace."""

    def __init__(self, namespace: Dict[str, Any]) -> None:
        self.namespace = namespace
        self._completer = rlcompleter.Completer(namespace)

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        match = _WORD_BEFORE_CURSOR.search(document.text_before_cursor)
        word = match.group(0) if match else ""
        for candidate in self.candidates(word):
            yield Completion(candidate, start_position=-len(word))

    def candidates(self, word: str) -> List[str]:
        if not word:
            return []
        results: List[str] = []
        # attribute completion evaluates the expression before the last dot
        with contextlib.redirect_stdout(io.StringIO()):
            for state in range(MAX_CANDIDATES):
                try:
                    candidate = self._completer.complete(word, state)
                except Exception:
                    break
                if candidate is None:
                    break
                results.append(candidate)
        return list(dict.fromkeys(results))


def complete_text(completer: Completer, text: str) -> List[str]:
    """Run *completer* over *text* and return full replacements for it."""
    document = Document(text, cursor_position=len(text))
    event = CompleteEvent(completion_requested=True)
    results: List[str] = []
    for completion in completer.get_completions(document, event):
        start = len(text) + completion.start_position
        results.append(text[:start] + completion.text)
    return list(dict.fromkeys(results))


__all__ = ["MAX_CANDIDATES", "NamespaceCompleter", "complete_text"]
