"""Symbol search and object metadata for editor documentation lookups."""

from __future__ import annotations

import builtins
import inspect
import logging
import pydoc
import sys
import types
import warnings
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .docparse import parse_doc

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]

_MISSING = object()
_CLASS_LEVEL = (classmethod, staticmethod, types.ClassMethodDescriptorType)
_INSTANCE_LEVEL = (
    types.FunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
)


# ---------------------------------------------------------------------------
# Prefix search
# ---------------------------------------------------------------------------
def search_symbols(prefix: str, namespace: Optional[Mapping[str, Any]] = None) -> Iterator[str]:
    """Lazily yield dotted names starting with *prefix*.

    Walks builtins, loaded top-level modules and (optionally) *namespace*,
    descending into modules and classes only while their dotted name could
    still lead to a match.  Each module/class is traversed once.
    """
    seen: Set[int] = set()
    emitted: Set[str] = set()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        for name, value in _root_entries(namespace):
            for match in _walk(prefix, name, value, seen):
                if match not in emitted:
                    emitted.add(match)
                    yield match


def _root_entries(namespace: Optional[Mapping[str, Any]]) -> Iterator[Tuple[str, Any]]:
    if namespace:
        for name, value in list(namespace.items()):
            if not name.startswith("__"):
                yield name, value
    for name, value in sorted(vars(builtins).items()):
        if not name.startswith("_"):
            yield name, value
    for name, module in sorted(list(sys.modules.items()), key=lambda item: item[0]):
        if module is not None and "." not in name and not name.startswith("_"):
            yield name, module


def _walk(prefix: str, name: str, value: Any, seen: Set[int]) -> Iterator[str]:
    matches = name.startswith(prefix)
    if not matches and not prefix.startswith(name):
        return
    if matches:
        yield name
    if not (inspect.ismodule(value) or inspect.isclass(value)):
        return
    if id(value) in seen:
        return
    seen.add(id(value))
    for attr in _safe_dir(value):
        if attr.startswith("_") and not prefix.startswith(f"{name}._"):
            continue
        try:
            child = getattr(value, attr)
        except Exception:
            continue
        if inspect.ismodule(child) and not _is_submodule(value, child):
            # aliased modules (os.path) only when the prefix names them
            if not prefix.startswith(f"{name}.{attr}."):
                continue
        yield from _walk(prefix, f"{name}.{attr}", child, seen)


def _safe_dir(value: Any) -> List[str]:
    try:
        return sorted(dir(value))
    except Exception:
        return []


def _is_submodule(parent: Any, child: types.ModuleType) -> bool:
    if not inspect.ismodule(parent):
        return False
    return getattr(child, "__name__", "").startswith(f"{parent.__name__}.")


# ---------------------------------------------------------------------------
# Object metadata
# ---------------------------------------------------------------------------
def resolve_symbol(symbol: str, namespace: Optional[Mapping[str, Any]] = None) -> Any:
    """Return the object named by *symbol*, or the module-level _MISSING marker."""
    if not symbol or not symbol.strip("."):
        return _MISSING
    if namespace is not None:
        value = _lookup(namespace, symbol)
        if value is not _MISSING:
            return value
    try:
        value = pydoc.locate(symbol)
    except pydoc.ErrorDuringImport as exc:
        logger.debug("import failed while resolving %s: %s", symbol, exc)
        return _MISSING
    if value is None:
        return _MISSING
    return value


def is_missing(value: Any) -> bool:
    return value is _MISSING


def _lookup(namespace: Mapping[str, Any], symbol: str) -> Any:
    head, *rest = symbol.split(".")
    if head not in namespace:
        return _MISSING
    value = namespace[head]
    for part in rest:
        try:
            value = getattr(value, part)
        except Exception:
            return _MISSING
    return value


def object_info(symbol: str, namespace: Optional[Mapping[str, Any]] = None) -> Optional[JsonDict]:
    """Describe *symbol*; None when it names no class, module or callable."""
    value = resolve_symbol(symbol, namespace)
    if value is _MISSING:
        return None
    if inspect.isclass(value) or inspect.ismodule(value):
        return describe_namespace(symbol, value)
    if inspect.isroutine(value):
        return describe_callable(symbol, value)
    return None


def describe_namespace(symbol: str, value: Any) -> JsonDict:
    is_class = inspect.isclass(value)
    if is_class:
        superclass = value.__base__
        methods, instance_methods = _class_members(value)
        mixins = _mixins(value)
    else:
        superclass = None
        methods = _module_members(value)
        instance_methods = {"new": [], "old": []}
        mixins = []
    return {
        "success": True,
        "symbol": symbol,
        "type": "class" if is_class else "module",
        "source-location": source_location(value),
        "superclass": qualified_name(superclass) if superclass is not None else None,
        "included-modules": mixins,
        "methods": methods,
        "instance-methods": instance_methods,
        "source": _source(value),
        "doc": parse_doc(_own_doc(value)),
    }


def describe_callable(symbol: str, value: Any) -> JsonDict:
    name = getattr(value, "__name__", None) or symbol.rsplit(".", 1)[-1]
    return {
        "success": True,
        "symbol": symbol,
        "type": "method",
        "source-location": source_location(value),
        "language": "python" if _has_python_code(value) else "c",
        "visibility": visibility(name),
        "signature": signature(value),
        "source": _source(value),
        "doc": parse_doc(inspect.getdoc(value)),
    }


def qualified_name(value: Any) -> str:
    module = getattr(value, "__module__", None)
    name = getattr(value, "__qualname__", None) or getattr(value, "__name__", repr(value))
    if not module or module == "builtins":
        return name
    return f"{module}.{name}"


def visibility(name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return "private"
    if name.startswith("_") and not name.endswith("__"):
        return "protected"
    return "public"


def signature(value: Any) -> Optional[str]:
    try:
        return str(inspect.signature(value))
    except (TypeError, ValueError):
        return None


def source_location(value: Any) -> Optional[List[Any]]:
    try:
        filename = inspect.getsourcefile(value) or inspect.getfile(value)
    except (OSError, TypeError):
        return None
    try:
        line = inspect.getsourcelines(value)[1] or 1
    except (OSError, TypeError):
        line = None
    return [filename, line]


def _source(value: Any) -> Optional[str]:
    try:
        return inspect.getsource(value)
    except (OSError, TypeError):
        return None


def _own_doc(value: Any) -> Optional[str]:
    doc = getattr(value, "__doc__", None)
    if not isinstance(doc, str):
        return None
    return inspect.cleandoc(doc)


def _has_python_code(value: Any) -> bool:
    target = getattr(value, "__func__", value)
    try:
        target = inspect.unwrap(target)
    except ValueError:
        return False
    return inspect.isfunction(target)


def _mixins(cls: type) -> List[str]:
    chain: Set[int] = set()
    base: Optional[type] = cls
    while base is not None:
        chain.add(id(base))
        base = base.__base__
    return [qualified_name(entry) for entry in cls.__mro__ if id(entry) not in chain]


def _split_members(namespace: Mapping[str, Any]) -> Tuple[List[str], List[str]]:
    class_level: List[str] = []
    instance_level: List[str] = []
    for name, member in namespace.items():
        if isinstance(member, _CLASS_LEVEL):
            class_level.append(name)
        elif isinstance(member, _INSTANCE_LEVEL):
            instance_level.append(name)
    return class_level, instance_level


def _class_members(cls: type) -> Tuple[JsonDict, JsonDict]:
    own_class, own_instance = _split_members(vars(cls))
    inherited_class: List[str] = []
    inherited_instance: List[str] = []
    for base in cls.__mro__[1:]:
        if base is object:
            continue
        base_class, base_instance = _split_members(vars(base))
        inherited_class.extend(base_class)
        inherited_instance.extend(base_instance)
    methods = {
        "new": sorted(own_class),
        "old": sorted(set(inherited_class) - set(own_class)),
    }
    instance_methods = {
        "new": sorted(own_instance),
        "old": sorted(set(inherited_instance) - set(own_instance)),
    }
    return methods, instance_methods


def _module_members(module: types.ModuleType) -> JsonDict:
    own: List[str] = []
    imported: List[str] = []
    for name, member in vars(module).items():
        if not inspect.isroutine(member):
            continue
        if getattr(member, "__module__", None) == module.__name__:
            own.append(name)
        else:
            imported.append(name)
    return {"new": sorted(own), "old": sorted(imported)}


__all__ = [
    "describe_callable",
    "describe_namespace",
    "is_missing",
    "object_info",
    "qualified_name",
    "resolve_symbol",
    "search_symbols",
    "signature",
    "source_location",
    "visibility",
]
