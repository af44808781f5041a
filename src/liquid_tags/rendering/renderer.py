"""Depth-first rendering of a compiled template tree."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING
from typing import TextIO

from ..exceptions import LiquidError
from ..exceptions import RenderError
from ..overrides import DEFAULT_OPAQUE_BLOCKS
from ..types import Node
from ..types import OutputNode
from ..types import TagNode
from ..types import TextNode
from ..values import to_output

if TYPE_CHECKING:
    from .context import RenderContext

logger = logging.getLogger(__name__)


def render_nodes(out: TextIO, nodes: Sequence[Node], context: RenderContext) -> None:
    for node in nodes:
        if isinstance(node, TextNode):
            out.write(node.text)
        elif isinstance(node, OutputNode):
            try:
                value = context.evaluate(node.expression)
            except LiquidError as e:
                if e.line is None:
                    e.line = node.line
                raise
            out.write(to_output(value))
        else:
            render_tag(out, node, context)


def render_tag(out: TextIO, node: TagNode, context: RenderContext) -> None:
    if node.step is None:
        _render_default(out, node)
        return
    try:
        node.step.render(out, context.for_node(node))
    except LiquidError as e:
        if e.line is None:
            e.line = node.line
        logger.debug("Render of '%s' (line %s) failed: %s", node.name, node.line, e)
        raise


def _render_default(out: TextIO, node: TagNode) -> None:
    spec = DEFAULT_OPAQUE_BLOCKS.get(node.name)
    if spec is None:
        raise RenderError(f"Tag '{node.name}' has no render step", line=node.line)
    if spec.kind == "raw":
        out.write(node.text)
