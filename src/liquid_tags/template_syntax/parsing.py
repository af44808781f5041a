"""
Tree building.

Turns the canonical token stream (`tokenize_template`) into a tree of
`TextNode` / `OutputNode` / `TagNode`, validating structure against a
`TagRegistry`:

- `end<name>` must close the innermost open block
- a branch clause (`elsif`, `else`, `when`) must be declared by the innermost
  open block
- governed tags (`break`, `continue`, `cycle`) must be nested, at any depth,
  inside one of their governors (`for`, `tablerow`)

Each tag occurrence is compiled as soon as it is complete (simple tags
immediately, block tags at their end tag), so inner blocks are compiled before
the blocks that contain them. Simple tags without a compiler get a
`SimpleTagStep` that calls their render function.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import TextIO

from ..exceptions import CompileError
from ..registry import TagRegistry
from ..types import Node
from ..types import OutputNode
from ..types import TagDefinition
from ..types import TagNode
from ..types import TextNode
from . import expressions
from .tokenization import TemplateToken
from .tokenization import tokenize_template

if TYPE_CHECKING:
    from ..rendering.context import RenderContext

logger = logging.getLogger(__name__)


@dataclass
class SimpleTagStep:
    """Render step for simple tags: calls the registered render function."""

    definition: TagDefinition

    def render(self, out: TextIO, context: RenderContext) -> None:
        if self.definition.render_fn is not None:
            self.definition.render_fn(out, context)


@dataclass
class _BlockState:
    definition: TagDefinition
    node: TagNode
    # Node whose body receives children: the block itself or its latest branch.
    target: TagNode


def parse_template_nodes(
    template: str,
    registry: TagRegistry,
    *,
    force_fallback: bool = False,
) -> list[Node]:
    """Tokenize and build the compiled node tree for a template string."""
    return build_tree(
        tokenize_template(template, force_fallback=force_fallback), registry
    )


def build_tree(tokens: list[TemplateToken], registry: TagRegistry) -> list[Node]:
    root: list[Node] = []
    stack: list[_BlockState] = []
    branch_names = registry.branch_names()

    def _body() -> list[Node]:
        return stack[-1].target.body if stack else root

    for tok in tokens:
        if tok.kind == "text":
            _body().append(TextNode(tok.contents, line=tok.line))
            continue

        if tok.kind == "var":
            try:
                expr = expressions.parse(tok.contents)
            except CompileError as e:
                e.line = tok.line
                raise
            _body().append(OutputNode(tok.contents, expr, line=tok.line))
            continue

        name = tok.name or ""
        definition = registry.get(name)

        if stack and name == stack[-1].definition.end_tag:
            entry = stack.pop()
            _compile(entry.node, entry.definition)
            continue

        if definition is not None:
            _check_governance(tok, registry, stack)
            node = TagNode(name=name, parameters=tok.parameters, line=tok.line)
            _body().append(node)
            if definition.is_block:
                stack.append(_BlockState(definition, node, node))
            elif definition.compiler is not None:
                _compile(node, definition)
            else:
                node.step = SimpleTagStep(definition)
            continue

        if name in branch_names:
            if not stack:
                raise CompileError(
                    f"Unexpected '{name}' outside any block", line=tok.line
                )
            entry = stack[-1]
            if name not in entry.definition.branches:
                raise CompileError(
                    f"Unexpected '{name}' inside '{entry.node.name}' block",
                    line=tok.line,
                )
            branch = TagNode(name=name, parameters=tok.parameters, line=tok.line)
            entry.node.branches.append(branch)
            entry.target = branch
            continue

        if name.startswith("end") and name[3:] in registry:
            if stack:
                raise CompileError(
                    f"Mismatched '{name}' inside '{stack[-1].node.name}' block",
                    line=tok.line,
                )
            raise CompileError(f"Unexpected '{name}' outside any block", line=tok.line)

        raise CompileError(f"Unknown tag '{name}'", line=tok.line)

    if stack:
        start = stack[-1].node
        raise CompileError(f"Unclosed '{start.name}' block", line=start.line)

    return root


def _check_governance(
    tok: TemplateToken,
    registry: TagRegistry,
    stack: list[_BlockState],
) -> None:
    name = tok.name or ""
    governors = registry.governors_of(name)
    if not governors:
        return
    if any(entry.definition.name in governors for entry in stack):
        return
    allowed = ", ".join(f"'{g}'" for g in sorted(governors))
    raise CompileError(f"'{name}' is only valid inside {allowed}", line=tok.line)


def _compile(node: TagNode, definition: TagDefinition) -> None:
    if definition.compiler is None:
        return
    try:
        node.step = definition.compiler(node)
    except CompileError as e:
        if e.line is None:
            e.line = node.line
        raise
    logger.debug("Compiled '%s' (line %s)", node.name, node.line)
