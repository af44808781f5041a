"""
Truthiness, equality and comparison over template values.

Template values are plain Python objects: `None` (nil), `bool`, `int`,
`float`, `str`, sequences (`list`/`tuple`) and mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .exceptions import RenderError
from .types import describe


class _Empty:
    """The `empty` / `blank` literal: equal to nil and to empty strings/collections."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name

    def matches(self, other: Any) -> bool:
        if other is None:
            return self.name == "blank"
        if isinstance(other, _Empty):
            return True
        if isinstance(other, str):
            if self.name == "blank":
                return not other.strip()
            return other == ""
        if isinstance(other, (list, tuple, Mapping)):
            return len(other) == 0
        return False


EMPTY = _Empty("empty")
BLANK = _Empty("blank")


def is_truthy(value: Any) -> bool:
    """Only nil and `false` are falsy; `0`, `""` and `[]` are truthy."""
    return value is not None and value is not False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def equal(a: Any, b: Any) -> bool:
    """
    Loose structural equality.

    - nil equals only nil
    - booleans equal only booleans (`true != 1`)
    - numbers compare numerically across int/float (`1 == 1.0`)
    - sequences and mappings are equal when structurally equal
    """
    if isinstance(a, _Empty):
        return a.matches(b)
    if isinstance(b, _Empty):
        return b.matches(a)
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, str) or isinstance(b, str):
        return isinstance(a, str) and isinstance(b, str) and a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(equal(a[k], b[k]) for k in a)
    return a == b


def compare(a: Any, b: Any) -> int:
    """
    Order two values for `<`, `<=`, `>`, `>=`.

    Returns -1, 0 or 1. Only number/number and string/string are ordered.
    """
    if (_is_number(a) and _is_number(b)) or (
        isinstance(a, str) and isinstance(b, str)
    ):
        return (a > b) - (a < b)
    raise RenderError(f"Cannot compare {describe(a)} with {describe(b)}")


def contains(container: Any, item: Any) -> bool:
    if container is None:
        return False
    if isinstance(container, str):
        return isinstance(item, str) and item in container
    if isinstance(container, Mapping):
        try:
            return item in container
        except TypeError:
            # Unhashable items cannot be keys.
            return False
    if isinstance(container, (list, tuple)):
        return any(equal(x, item) for x in container)
    return False


def to_output(value: Any) -> str:
    """Text written for a `{{ ... }}` statement."""
    if value is None or isinstance(value, _Empty):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "".join(to_output(v) for v in value)
    return str(value)
