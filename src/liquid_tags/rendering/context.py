"""
Per-render state.

One `RenderContext` flows through a single render pass. Render steps receive
a view bound to the tag occurrence being rendered (`for_node()`); every view
shares the pass's variable scope.
"""

from __future__ import annotations

from collections.abc import Mapping
from io import StringIO
from typing import TYPE_CHECKING
from typing import Any
from typing import TextIO

from ..config import RenderConfig
from ..exceptions import RenderError
from ..exceptions import UndefinedVariableError
from ..types import TagNode
from .renderer import render_nodes

if TYPE_CHECKING:
    from ..registry import TagRegistry
    from ..template_syntax.expressions import Expression

_UNSET = object()


class _PassState:
    """State shared by every view of one render pass."""

    __slots__ = ("globals", "locals", "cycles")

    def __init__(self, variables: Mapping[str, Any]) -> None:
        self.globals = dict(variables)
        self.locals: dict[str, Any] = {}
        self.cycles: dict[Any, int] = {}


class RenderContext:
    def __init__(
        self,
        variables: Mapping[str, Any] | None = None,
        *,
        registry: TagRegistry,
        config: RenderConfig | None = None,
        node: TagNode | None = None,
        _state: _PassState | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or RenderConfig()
        self.node = node
        self._state = _state or _PassState(variables or {})

    def for_node(self, node: TagNode) -> RenderContext:
        """A view of this context bound to one tag occurrence."""
        return RenderContext(
            registry=self.registry,
            config=self.config,
            node=node,
            _state=self._state,
        )

    # -----------------------------------------------------------------------
    # Variables
    # -----------------------------------------------------------------------

    def resolve(self, name: str) -> Any:
        value = self._state.locals.get(name, _UNSET)
        if value is _UNSET:
            value = self._state.globals.get(name, _UNSET)
        if value is _UNSET:
            if self.config.strict_variables:
                raise UndefinedVariableError(name, line=self._line)
            return None
        return value

    def set(self, name: str, value: Any) -> None:
        self._state.locals[name] = value

    def evaluate(self, expression: Expression) -> Any:
        return expression.evaluate(self)

    # -----------------------------------------------------------------------
    # Bodies
    # -----------------------------------------------------------------------

    def render_branch(self, out: TextIO, node: TagNode) -> None:
        """
        Render `node.body` to `out`.

        The body is rendered into a scratch buffer first so a failing body
        writes nothing.
        """
        buf = StringIO()
        render_nodes(buf, node.body, self)
        out.write(buf.getvalue())

    def capture_inner(self) -> str:
        """Render the bound occurrence's body into a string."""
        if self.node is None:
            raise RenderError("capture_inner() called outside a tag")
        buf = StringIO()
        render_nodes(buf, self.node.body, self)
        return buf.getvalue()

    def cycle(self, group: Any, values: list[Any]) -> Any:
        """Next value of a rotation group; groups keep their position per pass."""
        if not values:
            raise RenderError("cycle requires at least one value", line=self._line)
        index = self._state.cycles.get(group, 0)
        self._state.cycles[group] = index + 1
        return values[index % len(values)]

    @property
    def _line(self) -> int | None:
        return self.node.line if self.node is not None else None
