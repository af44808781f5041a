from __future__ import annotations

import pytest

from liquid_tags.exceptions import RenderError
from liquid_tags.values import BLANK
from liquid_tags.values import EMPTY
from liquid_tags.values import compare
from liquid_tags.values import contains
from liquid_tags.values import equal
from liquid_tags.values import is_truthy
from liquid_tags.values import to_output


@pytest.mark.parametrize("value", [0, 0.0, "", [], {}, True, "false", "nil"])
def test_truthy(value) -> None:
    assert is_truthy(value)


@pytest.mark.parametrize("value", [None, False])
def test_falsy(value) -> None:
    assert not is_truthy(value)


@pytest.mark.parametrize(
    "a,b",
    [
        (None, None),
        (1, 1),
        (1, 1.0),
        ("a", "a"),
        (True, True),
        ([1, "a"], (1.0, "a")),
        ({"a": [1]}, {"a": [1.0]}),
        ("", EMPTY),
        ([], EMPTY),
        (None, BLANK),
        ("  ", BLANK),
    ],
)
def test_equal(a, b) -> None:
    assert equal(a, b)
    assert equal(b, a)


@pytest.mark.parametrize(
    "a,b",
    [
        (None, False),
        (None, 0),
        (True, 1),
        (False, 0),
        ("1", 1),
        ([1, 2], [1]),
        ({"a": 1}, {"b": 1}),
        (None, EMPTY),
        ("x", EMPTY),
        ("  ", EMPTY),
    ],
)
def test_not_equal(a, b) -> None:
    assert not equal(a, b)
    assert not equal(b, a)


def test_compare() -> None:
    assert compare(1, 2) == -1
    assert compare(2.5, 2) == 1
    assert compare("b", "b") == 0


@pytest.mark.parametrize("a,b", [(1, "1"), (None, 1), (True, 1), ([1], [2])])
def test_compare_incompatible(a, b) -> None:
    with pytest.raises(RenderError, match="Cannot compare"):
        compare(a, b)


def test_contains() -> None:
    assert contains("hello", "ell")
    assert not contains("hello", 1)
    assert contains([1, 2], 2.0)
    assert contains({"k": 1}, "k")
    assert not contains({"k": 1}, ["k"])
    assert not contains(None, "x")
    assert not contains(5, 5)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (["a", 1, None], "a1"),
        ("hi", "hi"),
    ],
)
def test_to_output(value, expected: str) -> None:
    assert to_output(value) == expected
