"""A container for a single value of any type, with checked retrieval."""

from __future__ import annotations

import copy
from typing import Any as _AnyType

_EMPTY = object()


class AnyCastError(TypeError):
    """Raised when a value is requested as a type it does not have."""


class Any:
    """Holds one value and remembers its exact type."""

    def __init__(self, value: _AnyType = _EMPTY) -> None:
        self._value = value

    def reset(self, value: _AnyType) -> None:
        """Replace the held value."""
        self._value = value

    def _content(self) -> _AnyType:
        if self._value is _EMPTY:
            raise ValueError("Error! Object not yet initialized.")
        return self._value

    def is_type(self, cls: type) -> bool:
        """Return True if the held value is exactly of type ``cls``."""
        return type(self._content()) is cls

    def clone(self) -> "Any":
        """Return a new holder with an independent copy of the value."""
        return Any(copy.deepcopy(self._content()))

    def __str__(self) -> str:
        return str(self._content())


def any_cast(src: Any, cls: type) -> _AnyType:
    """Return the value held by ``src``, which must be exactly of type ``cls``."""
    if not src.is_type(cls):
        actual = type(src._content()).__name__
        raise AnyCastError(
            "Error! Invalid cast requested.\n"
            f"   - actual type:    {actual}\n"
            f"   - requested type: {cls.__name__}'."
        )
    return src._content()