"""
Compilers for the branching tags: `if` / `unless`, `case` / `when` and
`capture`.

Every expression is parsed once, when the tag occurrence is compiled; the
returned render steps only evaluate.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import TextIO

from ..exceptions import CompileError
from ..template_syntax import expressions
from ..template_syntax.expressions import Expression
from ..types import CompiledBranch
from ..types import ConditionalOn
from ..types import TagNode
from ..types import TextNode
from ..types import Unconditional
from ..values import equal
from ..values import is_truthy

if TYPE_CHECKING:
    from ..rendering.context import RenderContext


# ---------------------------------------------------------------------------
# if / unless
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BranchStep:
    """Render the body of the first branch whose test is truthy."""

    branches: tuple[CompiledBranch, ...]

    def render(self, out: TextIO, context: RenderContext) -> None:
        for branch in self.branches:
            if isinstance(branch, ConditionalOn):
                if not is_truthy(context.evaluate(branch.test)):
                    continue
            context.render_branch(out, branch.node)
            return


def if_tag_compiler(polarity: bool) -> Callable[[TagNode], BranchStep]:
    """
    Build the compiler for `if` (polarity True) or `unless` (polarity False).

    `unless` negates only the primary test; its `elsif` clauses keep their
    own sense.
    """

    def compile_if(node: TagNode) -> BranchStep:
        test = expressions.parse(node.parameters)
        if not polarity:
            test = expressions.negate(test)
        branches: list[CompiledBranch] = [ConditionalOn(test, node)]
        for clause in node.branches:
            if clause.name == "elsif":
                branches.append(
                    ConditionalOn(_parse(clause.parameters, clause), clause)
                )
            else:
                # `else`, and anything else the registry lets through.
                branches.append(Unconditional(clause))
        return BranchStep(tuple(branches))

    return compile_if


# ---------------------------------------------------------------------------
# case / when
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CaseStep:
    """Render the first `when` whose candidate equals the subject."""

    subject: Expression
    whens: tuple[tuple[Expression, TagNode], ...]

    def render(self, out: TextIO, context: RenderContext) -> None:
        value = context.evaluate(self.subject)
        for candidate, node in self.whens:
            if equal(value, context.evaluate(candidate)):
                context.render_branch(out, node)
                return


def compile_case(node: TagNode) -> CaseStep:
    for child in node.body:
        if not isinstance(child, TextNode) or child.text.strip():
            raise CompileError(
                "'case' may only contain 'when' clauses", line=node.line
            )
    subject = expressions.parse(node.parameters)
    whens: list[tuple[Expression, TagNode]] = []
    for clause in node.branches:
        try:
            candidates = expressions.parse_list(clause.parameters)
        except CompileError as e:
            e.line = clause.line
            raise
        whens.extend((candidate, clause) for candidate in candidates)
    return CaseStep(subject, tuple(whens))


# ---------------------------------------------------------------------------
# capture
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CaptureStep:
    """Render the body into a string and bind it; writes nothing."""

    name: str

    def render(self, out: TextIO, context: RenderContext) -> None:
        text = context.capture_inner()
        context.set(self.name, text)


def compile_capture(node: TagNode) -> CaptureStep:
    name = node.parameters.strip()
    if not name:
        raise CompileError("'capture' requires a variable name", line=node.line)
    return CaptureStep(name)


def _parse(text: str, node: TagNode) -> Expression:
    try:
        return expressions.parse(text)
    except CompileError as e:
        e.line = node.line
        raise
