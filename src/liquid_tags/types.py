"""
Shared types for registration, compilation and rendering.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from enum import auto
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol
from typing import TextIO

if TYPE_CHECKING:
    from .rendering.context import RenderContext
    from .template_syntax.expressions import Expression


class TagKind(Enum):
    """Classification of registered tags."""

    SIMPLE = auto()  # {% tag %}
    BLOCK = auto()  # {% tag %}...{% endtag %}
    SIGNAL = auto()  # simple tag that only makes sense inside a governing block


class RenderStep(Protocol):
    """The compiled, executable form of one tag occurrence."""

    def render(self, out: TextIO, context: RenderContext) -> None: ...


# A tag compiler turns one TagNode occurrence into its render step.
TagCompiler = Callable[["TagNode"], RenderStep]

# Render function for simple tags; receives a context bound to the occurrence.
SimpleTagFn = Callable[[TextIO, "RenderContext"], None]


# ---------------------------------------------------------------------------
# Template tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextNode:
    """Literal template text."""

    text: str
    line: int = 0


@dataclass(frozen=True, slots=True)
class OutputNode:
    """A `{{ ... }}` output statement."""

    source: str
    expression: Expression
    line: int = 0


@dataclass(eq=False)
class TagNode:
    """
    A parsed occurrence of a tag.

    `branches` holds the secondary clauses (`elsif`/`else` under `if`, `when`
    under `case`), each a TagNode with its own body. `step` is filled in by
    the tree builder once the occurrence is complete.
    """

    name: str
    parameters: str = ""
    body: list[Node] = field(default_factory=list)
    branches: list[TagNode] = field(default_factory=list)
    line: int = 0
    step: RenderStep | None = None

    @property
    def text(self) -> str:
        """Concatenated text of the body (used for opaque blocks)."""
        return "".join(n.text for n in self.body if isinstance(n, TextNode))


Node = TextNode | OutputNode | TagNode


# ---------------------------------------------------------------------------
# Registry entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TagDefinition:
    """
    Registry entry for a single tag name.

    When `syntax_alias` is set, the aliased definition supplies the branch and
    governance shape (e.g. `unless` accepts the same clauses as `if`).
    """

    name: str
    is_block: bool = False
    kind: TagKind = TagKind.SIMPLE
    declared_branches: tuple[str, ...] = ()
    declared_governs: frozenset[str] = frozenset()
    syntax_alias: TagDefinition | None = None
    compiler: TagCompiler | None = None
    render_fn: SimpleTagFn | None = None

    @property
    def branches(self) -> tuple[str, ...]:
        if self.syntax_alias is not None:
            return self.syntax_alias.branches
        return self.declared_branches

    @property
    def governs(self) -> frozenset[str]:
        if self.syntax_alias is not None:
            return self.syntax_alias.governs
        return self.declared_governs

    @property
    def end_tag(self) -> str | None:
        return f"end{self.name}" if self.is_block else None


@dataclass(frozen=True)
class OpaqueBlockSpec:
    """
    Spec for block tags whose inner content is not parsed.

    `kind` selects the default rendering: "raw" emits the text verbatim,
    "comment" emits nothing.
    """

    end_tags: tuple[str, ...]
    kind: str = ""


# ---------------------------------------------------------------------------
# Compiled branches
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Unconditional:
    """A branch that always matches (`else`)."""

    node: TagNode


@dataclass(frozen=True, slots=True)
class ConditionalOn:
    """A branch guarded by a test expression."""

    test: Expression
    node: TagNode


CompiledBranch = Unconditional | ConditionalOn


def merge_opaque_blocks(
    base: dict[str, OpaqueBlockSpec],
    extra: dict[str, OpaqueBlockSpec],
) -> dict[str, OpaqueBlockSpec]:
    """
    Merge opaque-block specs.

    `end_tags` are unioned and sorted; `kind` keeps the first non-empty value.
    """
    merged = dict(base)
    for name, spec in extra.items():
        existing = merged.get(name)
        if existing is None:
            merged[name] = spec
            continue
        merged[name] = OpaqueBlockSpec(
            end_tags=tuple(sorted(set(existing.end_tags + spec.end_tags))),
            kind=existing.kind or spec.kind,
        )
    return merged


def resolve_opaque_blocks(
    opaque_blocks: dict[str, OpaqueBlockSpec] | None,
    *,
    defaults: dict[str, OpaqueBlockSpec] | None = None,
) -> dict[str, OpaqueBlockSpec]:
    """Normalize an optional opaque-block mapping with optional defaults."""
    base = dict(defaults or {})
    if not opaque_blocks:
        return base
    return merge_opaque_blocks(base, opaque_blocks)


def describe(value: Any) -> str:
    """Short type name used in error messages."""
    if value is None:
        return "nil"
    return type(value).__name__
