"""Small helpers for searching and editing containers, and type-name utilities."""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping, MutableSequence, MutableSet
from typing import Any


def find(container: Iterable[Any], value: Any) -> int | None:
    """Return the position of the first item equal to ``value``, or None."""
    return next((pos for pos, item in enumerate(container) if item == value), None)


def contains(container: Iterable[Any], value: Any) -> bool:
    """Return True if any item of ``container`` equals ``value``."""
    return any(item == value for item in container)


def erase(container: Any, value: Any) -> bool:
    """Remove the first item equal to ``value``; return whether one was removed."""
    if isinstance(container, MutableSequence):
        pos = find(container, value)
        if pos is None:
            return False
        del container[pos]
        return True
    if isinstance(container, (MutableSet, MutableMapping)):
        if value in container:
            if isinstance(container, MutableMapping):
                del container[value]
            else:
                container.remove(value)
            return True
        return False
    raise TypeError(f"cannot erase from a {type(container).__name__}")


def count(container: Iterable[Any], value: Any) -> int:
    """Return how many items of ``container`` equal ``value``."""
    return sum(1 for item in container if item == value)


def same_type(*args: type) -> bool:
    """Return True if all the given types are the same type."""
    if not args:
        raise TypeError("same_type needs at least one type")
    first = args[0]
    return all(t is first for t in args)


def format_sequence(values: Iterable[Any]) -> str:
    """Render the items separated by single spaces."""
    return " ".join(str(v) for v in values)


def remove_all_pointers(type_name: str) -> str:
    """Strip every trailing pointer level from a type name."""
    return type_name.strip().rstrip("*").rstrip()


def _strip_top_const(type_name: str) -> str:
    name = type_name.strip()
    if name.endswith("const") and (len(name) == 5 or name[-6] in " *"):
        return name[:-5].rstrip()
    if "*" not in name and name.startswith("const "):
        return name[6:].strip()
    return name


def remove_all_consts(type_name: str) -> str:
    """Remove const qualifiers from a type name at every pointer level."""
    name = _strip_top_const(type_name)
    if name.endswith("*"):
        return remove_all_consts(name[:-1]) + "*"
    return name


def data_nd(scalar: str, n: int) -> str:
    """Return the type name of an ``n``-dimensional dynamic array of ``scalar``."""
    if n < 0:
        raise ValueError("number of dimensions must be non-negative")
    return scalar.strip() + "*" * n