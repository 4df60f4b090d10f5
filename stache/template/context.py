"""
Context values and name resolution.

A context (the "view") is whatever data the template is rendered against.
Python values are sorted into a small closed set of shapes, and both the
resolver and the renderer branch on that shape rather than probing types
ad hoc:

- SCALAR    strings, numbers, booleans, None; nothing to descend into
- LIST      sequences, sets, iterators, and mappings keyed 0..n-1;
            other iterable objects (models, records) stay OBJECT
- MAP       any other mapping
- CALLABLE  a safe callback (see ``is_safe_callback``)
- OBJECT    any other object; members are looked up as attributes
- OPAQUE    callables that must never be invoked (classes, builtins)
"""

from __future__ import annotations

import enum
import inspect
import numbers
from collections.abc import Iterator, Mapping, MappingView, Sequence, Set
from typing import Any

# Result of every failed lookup
EMPTY = ""

_MISSING = object()


class ContextKind(enum.Enum):
    SCALAR = "scalar"
    LIST = "list"
    MAP = "map"
    CALLABLE = "callable"
    OBJECT = "object"
    OPAQUE = "opaque"


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, bytes, bool, numbers.Number))


def is_method_pair(value: Any) -> bool:
    """
    True for a ``(target, "method_name")`` pair naming a callable member
    of a real object (not a class, not a scalar).
    """
    if not isinstance(value, tuple) or len(value) != 2:
        return False
    target, name = value
    if not isinstance(name, str) or name.startswith("__"):
        return False
    if is_scalar(target) or isinstance(target, type):
        return False
    return callable(getattr(target, name, None))


def is_safe_callback(value: Any) -> bool:
    """
    Decide whether a value may be invoked by the engine.

    Accepted: functions and lambdas, bound methods, callable instances and
    method pairs. Rejected: strings, classes (calling them would construct
    arbitrary objects) and builtins.
    """
    if is_method_pair(value):
        return True
    if isinstance(value, (str, bytes, type)):
        return False
    if inspect.isbuiltin(value):
        return False
    return callable(value)


def _is_index_mapping(value: Mapping) -> bool:
    # {0: a, 1: b, ...} behaves as a list
    if not value:
        return False
    return all(isinstance(k, int) and not isinstance(k, bool) for k in value) \
        and set(value) == set(range(len(value)))


def classify(value: Any) -> ContextKind:
    if is_scalar(value):
        return ContextKind.SCALAR
    if isinstance(value, type) or inspect.isbuiltin(value):
        return ContextKind.OPAQUE
    if is_method_pair(value):
        return ContextKind.CALLABLE
    if isinstance(value, Mapping):
        return ContextKind.LIST if _is_index_mapping(value) else ContextKind.MAP
    if callable(value):
        return ContextKind.CALLABLE
    if isinstance(value, (Sequence, Set, MappingView, Iterator)):
        return ContextKind.LIST
    return ContextKind.OBJECT


def iterate(value: Any) -> Iterator[Any]:
    """Iterate a LIST-shaped value; index mappings yield values in key order."""
    if isinstance(value, Mapping):
        return (value[i] for i in range(len(value)))
    return iter(value)


def invoke(callback: Any, *args: Any) -> Any:
    """Invoke a safe callback (method pair or plain callable)."""
    if is_method_pair(callback):
        target, name = callback
        return getattr(target, name)(*args)
    return callback(*args)


def resolve_value(path: str, context: Any) -> Any:
    """
    Resolve a (possibly dotted) name against a context.

    Returns the found value, or an empty string when nothing matches.
    A dot at position 0 does not split the name, so "." and ".x" are
    looked up as-is.
    """
    kind = classify(context)
    if kind in (ContextKind.SCALAR, ContextKind.OPAQUE, ContextKind.CALLABLE):
        return EMPTY

    if path.find(".") > 0:
        first, rest = path.split(".", 1)
        value = resolve_value(first, context)
        if classify(value) in (ContextKind.SCALAR, ContextKind.OPAQUE):
            # Cannot de-reference scalar data
            return EMPTY
        return resolve_value(rest, value)

    if isinstance(context, Mapping):
        return _resolve_in_mapping(path, context)
    if kind is ContextKind.LIST:
        return _resolve_in_sequence(path, context)
    return _resolve_in_object(path, context)


def _resolve_in_mapping(path: str, context: Mapping) -> Any:
    if path in context:
        value = context[path]
    elif path.isdigit() and int(path) in context:
        value = context[int(path)]
    else:
        return EMPTY
    if value is None:
        return EMPTY
    if is_method_pair(value):
        return invoke(value)
    return value


def _resolve_in_sequence(path: str, context: Any) -> Any:
    # Only positional access; names never resolve against a list
    if not path.isdigit() or not isinstance(context, Sequence):
        return EMPTY
    index = int(path)
    if index >= len(context):
        return EMPTY
    value = context[index]
    return EMPTY if value is None else value


def _resolve_in_object(path: str, context: Any) -> Any:
    if not path or path.startswith("__"):
        return EMPTY
    member = getattr(context, path, _MISSING)
    if member is _MISSING or member is None:
        return EMPTY
    if inspect.ismethod(member) and _takes_no_arguments(member):
        return member()
    # Methods needing arguments stay callable: a section turns them into lambdas
    return member


def _takes_no_arguments(method: Any) -> bool:
    try:
        inspect.signature(method).bind()
    except (TypeError, ValueError):
        return False
    return True


__all__ = [
    "EMPTY",
    "ContextKind",
    "is_scalar",
    "is_method_pair",
    "is_safe_callback",
    "classify",
    "iterate",
    "invoke",
    "resolve_value",
]
