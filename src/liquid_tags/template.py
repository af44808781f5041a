"""
Template facade: parse once, render many times.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from io import StringIO
from typing import Any

from .config import RenderConfig
from .exceptions import LoopSignal
from .exceptions import RenderError
from .registry import TagRegistry
from .rendering.context import RenderContext
from .rendering.renderer import render_nodes
from .tags import default_registry
from .template_syntax.parsing import parse_template_nodes
from .types import Node


@dataclass
class Template:
    source: str
    nodes: list[Node]
    registry: TagRegistry
    config: RenderConfig = field(default_factory=RenderConfig)

    def render(self, variables: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """
        Render with `variables` (and/or keyword arguments) as global scope.

        Each call uses a fresh RenderContext, so concurrent renders of the same
        Template do not share state.
        """
        scope = dict(variables or {})
        scope.update(kwargs)
        context = RenderContext(scope, registry=self.registry, config=self.config)
        out = StringIO()
        try:
            render_nodes(out, self.nodes, context)
        except LoopSignal as e:
            raise RenderError(f"'{e.tag_name}' escaped its enclosing loop") from e
        return out.getvalue()


def parse_template(
    source: str,
    *,
    registry: TagRegistry | None = None,
    config: RenderConfig | None = None,
) -> Template:
    """
    Compile template source.

    Raises CompileError for malformed expressions or tag structure; a template
    is never partially compiled.
    """
    if registry is None:
        registry = default_registry()
    config = config or RenderConfig()
    nodes = parse_template_nodes(
        source, registry, force_fallback=config.force_fallback_lexer
    )
    return Template(source=source, nodes=nodes, registry=registry, config=config)
