"""
Loop-scoped tags: `break`, `continue` and `cycle`.

The tree builder only accepts them inside a governing `for` / `tablerow`
block. `break` and `continue` hand control back to the loop engine by raising
a `LoopSignal`. `cycle` parameters are parsed when the template is compiled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import TextIO

from ..exceptions import BreakSignal
from ..exceptions import ContinueSignal
from ..template_syntax import expressions
from ..template_syntax.expressions import Expression
from ..types import TagNode
from ..values import to_output

if TYPE_CHECKING:
    from ..rendering.context import RenderContext


def break_tag(out: TextIO, context: RenderContext) -> None:
    raise BreakSignal()


def continue_tag(out: TextIO, context: RenderContext) -> None:
    raise ContinueSignal()


# `cycle 'group': 'a', 'b'` -- the group is a literal or a variable path.
_GROUP_RE = re.compile(r"""^\s*("[^"]*"|'[^']*'|[\w.\[\]-]+)\s*:(?!:)(.*)$""", re.DOTALL)


def parse_cycle(parameters: str) -> tuple[Expression | None, tuple[Expression, ...]]:
    """Split `cycle` parameters into an optional group and the value list."""
    group: Expression | None = None
    rest = parameters
    match = _GROUP_RE.match(parameters)
    if match:
        group = expressions.parse(match.group(1))
        rest = match.group(2)
    return group, tuple(expressions.parse_list(rest))


@dataclass(frozen=True)
class CycleStep:
    """
    Writes the next value of a rotation group.

    Unnamed groups rotate under their parameter text, so two occurrences with
    the same values share a position.
    """

    group: Expression | None
    values: tuple[Expression, ...]
    parameters: str

    def render(self, out: TextIO, context: RenderContext) -> None:
        key = (
            context.evaluate(self.group) if self.group is not None else self.parameters
        )
        values = [context.evaluate(expr) for expr in self.values]
        out.write(to_output(context.cycle(key, values)))


def compile_cycle(node: TagNode) -> CycleStep:
    group, values = parse_cycle(node.parameters)
    return CycleStep(group, values, node.parameters)
