"""Docstring parsing into JSON-friendly tag dictionaries."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from docstring_parser import (
    DocstringDeprecated,
    DocstringMeta,
    DocstringParam,
    DocstringRaises,
    DocstringReturns,
    ParseError,
    parse,
)

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]


def parse_doc(text: Optional[str]) -> Optional[JsonDict]:
    """Parse a docstring (Google, ReST, Numpydoc or Epydoc style).

    Returns None when there is no docstring.  A docstring the parser rejects
    is returned as plain text with no tags.
    """
    if not text:
        return None
    try:
        docstring = parse(text)
    except ParseError as exc:
        logger.debug("docstring parse failed: %s", exc)
        summary = text.strip().splitlines()[0] if text.strip() else None
        return {"text": text, "summary": summary, "description": None, "tags": []}
    return {
        "text": text,
        "summary": docstring.short_description,
        "description": docstring.long_description,
        "tags": [doc_tag_to_dict(meta) for meta in docstring.meta],
    }


def doc_tag_to_dict(meta: DocstringMeta) -> JsonDict:
    entry: JsonDict = {
        "tag-name": meta.args[0] if meta.args else None,
        "name": None,
        "types": [],
        "text": meta.description,
    }
    if isinstance(meta, DocstringParam):
        entry.update(
            name=meta.arg_name,
            types=_types(meta.type_name),
            default=meta.default,
            optional=meta.is_optional,
        )
    elif isinstance(meta, DocstringReturns):
        entry.update(
            name=meta.return_name,
            types=_types(meta.type_name),
            generator=meta.is_generator,
        )
    elif isinstance(meta, DocstringRaises):
        entry.update(types=_types(meta.type_name))
    elif isinstance(meta, DocstringDeprecated):
        entry.update(version=meta.version)
    return entry


def _types(type_name: Optional[str]) -> List[str]:
    return [type_name] if type_name else []


__all__ = ["doc_tag_to_dict", "parse_doc"]
