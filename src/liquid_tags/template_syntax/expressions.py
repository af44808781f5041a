"""
Expressions used by tag parameters and `{{ ... }}` output statements.

A small Pratt parser (same shape as Django's `smartif.py`) over a regex
tokenizer. Operands are literals or variable paths; operators are the
comparison and boolean operators used in `if`/`elsif`/`unless`/`when`.

Parsing happens once, when a tag is compiled. The resulting `Expression`
objects are immutable and evaluated against a context on every render.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from typing import Protocol

from ..exceptions import CompileError
from ..values import BLANK
from ..values import EMPTY
from ..values import compare
from ..values import contains
from ..values import equal
from ..values import is_truthy


class Scope(Protocol):
    def resolve(self, name: str) -> Any: ...


# ---------------------------------------------------------------------------
# Expression tree
# ---------------------------------------------------------------------------


class Expression:
    def evaluate(self, scope: Scope) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Literal(Expression):
    value: Any

    def evaluate(self, scope: Scope) -> Any:
        return self.value


@dataclass(frozen=True)
class Variable(Expression):
    """
    A variable path such as `user.name`, `items[0]` or `page["title"]`.

    Each accessor is either a plain attribute name (dot syntax) or an
    expression evaluated to produce the key (bracket syntax).
    """

    name: str
    accessors: tuple[str | Expression, ...] = ()

    def evaluate(self, scope: Scope) -> Any:
        value = scope.resolve(self.name)
        for accessor in self.accessors:
            if value is None:
                return None
            key = accessor if isinstance(accessor, str) else accessor.evaluate(scope)
            value = _lookup(value, key, dotted=isinstance(accessor, str))
        return value


@dataclass(frozen=True)
class Not(Expression):
    operand: Expression

    def evaluate(self, scope: Scope) -> Any:
        return not is_truthy(self.operand.evaluate(scope))


@dataclass(frozen=True)
class Logical(Expression):
    op: str  # "and" or "or"
    left: Expression
    right: Expression

    def evaluate(self, scope: Scope) -> Any:
        left = is_truthy(self.left.evaluate(scope))
        if self.op == "and" and not left:
            return False
        if self.op == "or" and left:
            return True
        return is_truthy(self.right.evaluate(scope))


@dataclass(frozen=True)
class Comparison(Expression):
    op: str
    left: Expression
    right: Expression

    def evaluate(self, scope: Scope) -> Any:
        return _COMPARATORS[self.op](
            self.left.evaluate(scope), self.right.evaluate(scope)
        )


def _ordering(test: Callable[[int], bool]) -> Callable[[Any, Any], bool]:
    def _compare(a: Any, b: Any) -> bool:
        # nil is unordered: every ordering test against it is false.
        if a is None or b is None:
            return False
        return test(compare(a, b))

    return _compare


_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": equal,
    "!=": lambda a, b: not equal(a, b),
    "<>": lambda a, b: not equal(a, b),
    "<": _ordering(lambda c: c < 0),
    "<=": _ordering(lambda c: c <= 0),
    ">": _ordering(lambda c: c > 0),
    ">=": _ordering(lambda c: c >= 0),
    "contains": contains,
}


def _lookup(value: Any, key: Any, *, dotted: bool) -> Any:
    if isinstance(value, Mapping):
        try:
            found = key in value
        except TypeError:
            return None
        if found:
            return value[key]
        if dotted and key == "size":
            return len(value)
        return None
    if isinstance(value, (list, tuple, str)):
        if isinstance(key, int) and not isinstance(key, bool):
            try:
                return value[key]
            except IndexError:
                return None
        if key == "size":
            return len(value)
        if key == "first":
            return value[0] if value else None
        if key == "last":
            return value[-1] if value else None
        return None
    if isinstance(key, str) and not key.startswith("_"):
        return getattr(value, key, None)
    return None


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    (?P<string>"[^"]*"|'[^']*')
    |(?P<number>-?\d+(?:\.\d+)?)(?![\w.])
    |(?P<op>==|!=|<>|<=|>=|<|>)
    |(?P<punct>[.\[\],])
    |(?P<name>[A-Za-z_][\w-]*\??)
    |(?P<space>\s+)
    """,
    re.VERBOSE,
)


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ValueError(f"Unexpected character '{text[pos]}'")
        pos = match.end()
        kind = match.lastgroup
        if kind == "space":
            continue
        tokens.append((kind or "", match.group(0)))
    return tokens


# ---------------------------------------------------------------------------
# Pratt parser
# ---------------------------------------------------------------------------


class _TokenBase:
    id: str | None = None
    lbp: int = 0

    def nud(self, parser: _ExpressionParser) -> Expression:
        raise parser.error_class(f"Not expecting '{self.id}' in this position")

    def led(self, left: Expression, parser: _ExpressionParser) -> Expression:
        raise parser.error_class(f"Not expecting '{self.id}' as infix operator")

    def display(self) -> str:
        return str(self.id)


class _Literal(_TokenBase):
    id = "literal"

    def __init__(self, text: str, value: Any) -> None:
        self.text = text
        self.value = value

    def display(self) -> str:
        return self.text

    def nud(self, parser: _ExpressionParser) -> Expression:
        return Literal(self.value)


class _Name(_TokenBase):
    id = "name"

    def __init__(self, text: str) -> None:
        self.text = text

    def display(self) -> str:
        return self.text

    def nud(self, parser: _ExpressionParser) -> Expression:
        return Variable(self.text, parser.accessors())


class _Punct(_TokenBase):
    def __init__(self, text: str) -> None:
        self.id = text


class _EndToken(_TokenBase):
    def nud(self, parser: _ExpressionParser) -> Expression:
        raise parser.error_class("Unexpected end of expression")


_END = _EndToken()


def _infix(bp: int, build: Callable[[str, Expression, Expression], Expression]):
    class _Op(_TokenBase):
        lbp = bp

        def led(self, left: Expression, parser: _ExpressionParser) -> Expression:
            return build(str(self.id), left, parser.expression(bp))

    return _Op


def _prefix(bp: int):
    class _Op(_TokenBase):
        lbp = bp

        def nud(self, parser: _ExpressionParser) -> Expression:
            return Not(parser.expression(bp))

    return _Op


_OR_BP = 6

_OPERATORS: dict[str, type[_TokenBase]] = {
    "or": _infix(_OR_BP, Logical),
    "and": _infix(7, Logical),
    "not": _prefix(8),
    "contains": _infix(10, Comparison),
    "==": _infix(10, Comparison),
    "!=": _infix(10, Comparison),
    "<>": _infix(10, Comparison),
    ">": _infix(10, Comparison),
    ">=": _infix(10, Comparison),
    "<": _infix(10, Comparison),
    "<=": _infix(10, Comparison),
}

for _op, _cls in _OPERATORS.items():
    _cls.id = _op

_KEYWORDS: dict[str, Any] = {
    "true": True,
    "false": False,
    "nil": None,
    "null": None,
    "empty": EMPTY,
    "blank": BLANK,
}


class _ExpressionParser:
    error_class = ValueError

    def __init__(self, text: str) -> None:
        self.tokens = [self._translate_token(k, v) for k, v in _tokenize(text)]
        self.pos = 0
        self.current_token = self._next_token()

    def _translate_token(self, kind: str, text: str) -> _TokenBase:
        if kind == "string":
            return _Literal(text, text[1:-1])
        if kind == "number":
            value = float(text) if "." in text else int(text)
            return _Literal(text, value)
        if kind == "punct":
            return _Punct(text)
        op = _OPERATORS.get(text)
        if op is not None:
            return op()
        if text in _KEYWORDS:
            return _Literal(text, _KEYWORDS[text])
        return _Name(text)

    def _next_token(self) -> _TokenBase:
        if self.pos >= len(self.tokens):
            return _END
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _advance(self) -> _TokenBase:
        tok = self.current_token
        self.current_token = self._next_token()
        return tok

    def _expect(self, token_id: str) -> None:
        if self.current_token.id != token_id:
            raise self.error_class(
                f"Expected '{token_id}', got '{self.current_token.display()}'"
            )
        self._advance()

    def accessors(self) -> tuple[str | Expression, ...]:
        out: list[str | Expression] = []
        while self.current_token.id in (".", "["):
            if self._advance().id == ".":
                tok = self._advance()
                if not isinstance(tok, _Name):
                    raise self.error_class(
                        f"Expected a property name after '.', got '{tok.display()}'"
                    )
                out.append(tok.text)
            else:
                out.append(self.expression())
                self._expect("]")
        return tuple(out)

    def parse(self) -> Expression:
        expr = self.expression()
        if self.current_token is not _END:
            raise self.error_class(
                f"Unused '{self.current_token.display()}' at end of expression"
            )
        return expr

    def parse_list(self) -> list[Expression]:
        exprs = [self.expression(_OR_BP)]
        while self.current_token.id in (",", "or"):
            self._advance()
            exprs.append(self.expression(_OR_BP))
        if self.current_token is not _END:
            raise self.error_class(
                f"Unused '{self.current_token.display()}' at end of expression"
            )
        return exprs

    def expression(self, rbp: int = 0) -> Expression:
        t = self._advance()
        left = t.nud(self)
        while rbp < self.current_token.lbp:
            t = self._advance()
            left = t.led(left, self)
        return left


def _compile_error(text: str, message: str) -> CompileError:
    return CompileError(f"Syntax error in expression '{text}': {message}")


def parse(text: str) -> Expression:
    """
    Parse expression text.

    Raises CompileError naming the malformed text.
    """
    try:
        return _ExpressionParser(text).parse()
    except ValueError as e:
        raise _compile_error(text, str(e)) from e


def parse_list(text: str) -> list[Expression]:
    """Parse a `when` candidate list: expressions separated by `,` or `or`."""
    try:
        return _ExpressionParser(text).parse_list()
    except ValueError as e:
        raise _compile_error(text, str(e)) from e


def negate(expr: Expression) -> Expression:
    return Not(expr)


def constant(value: Any) -> Expression:
    return Literal(value)
