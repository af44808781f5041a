"""
Tag registry.

Maps tag names to `TagDefinition`s. A registry is built once at startup with
`define_simple_tag()` / `define_block_tag()`, then frozen; the tree builder
consults it to decide which tags open blocks, which clauses are legal branches
of which block, and which tags may only appear inside a governing block.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import replace

from .exceptions import RegistryError
from .types import SimpleTagFn
from .types import TagCompiler
from .types import TagDefinition
from .types import TagKind

logger = logging.getLogger(__name__)


class TagRegistry:
    def __init__(self) -> None:
        self._definitions: dict[str, TagDefinition] = {}
        self._frozen = False

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> TagRegistry:
        self._frozen = True
        logger.debug("Registry frozen with %d tags", len(self._definitions))
        return self

    def _check_writable(self, name: str) -> None:
        if self._frozen:
            raise RegistryError(f"Cannot register '{name}': registry is frozen")

    def _add(self, definition: TagDefinition) -> None:
        self._check_writable(definition.name)
        if definition.name in self._definitions:
            raise RegistryError(f"Tag '{definition.name}' is already defined")
        self._definitions[definition.name] = definition
        logger.debug("Registered %s tag '%s'", definition.kind.name.lower(), definition.name)

    def _update(self, definition: TagDefinition) -> None:
        self._check_writable(definition.name)
        self._definitions[definition.name] = definition

    # -----------------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------------

    def define_simple_tag(
        self,
        name: str,
        render_fn: SimpleTagFn | None = None,
        *,
        kind: TagKind = TagKind.SIMPLE,
        compiler: TagCompiler | None = None,
    ) -> TagDefinition:
        """
        Register a non-block tag.

        Give either a fixed `render_fn`, or a `compiler` that checks the
        occurrence's parameters when the template is compiled and returns its
        render step.
        """
        if kind is TagKind.BLOCK:
            raise RegistryError(f"Simple tag '{name}' cannot have kind BLOCK")
        if (render_fn is None) == (compiler is None):
            raise RegistryError(
                f"Simple tag '{name}' needs exactly one of render_fn or compiler"
            )
        definition = TagDefinition(
            name=name, kind=kind, compiler=compiler, render_fn=render_fn
        )
        self._add(definition)
        return definition

    def define_block_tag(self, name: str) -> BlockTagBuilder:
        """Register a block tag; returns a builder for its clauses and compiler."""
        self._add(TagDefinition(name=name, is_block=True, kind=TagKind.BLOCK))
        return BlockTagBuilder(self, name)

    # -----------------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------------

    def get(self, name: str) -> TagDefinition | None:
        return self._definitions.get(name)

    def lookup(self, name: str) -> TagDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise KeyError(f"Unknown tag '{name}'") from None

    def branches_of(self, name: str) -> tuple[str, ...]:
        return self.lookup(name).branches

    def governors_of(self, name: str) -> frozenset[str]:
        """Names of block tags that govern `name`."""
        return frozenset(
            d.name for d in self._definitions.values() if name in d.governs
        )

    def is_governed(self, name: str) -> bool:
        return any(name in d.governs for d in self._definitions.values())

    def branch_names(self) -> frozenset[str]:
        """Every name declared as a branch clause of some block tag."""
        names: set[str] = set()
        for d in self._definitions.values():
            names.update(d.branches)
        return frozenset(names)


class BlockTagBuilder:
    """Chainable builder returned by `TagRegistry.define_block_tag()`."""

    def __init__(self, registry: TagRegistry, name: str) -> None:
        self._registry = registry
        self.name = name

    @property
    def definition(self) -> TagDefinition:
        return self._registry.lookup(self.name)

    def _set(self, **changes) -> BlockTagBuilder:
        self._registry._update(replace(self.definition, **changes))
        return self

    def branch(self, name: str) -> BlockTagBuilder:
        """Declare `name` as a legal branch clause (`elsif`, `else`, `when`)."""
        current = self.definition.declared_branches
        if name in current:
            return self
        return self._set(declared_branches=current + (name,))

    def governs(self, names: Iterable[str]) -> BlockTagBuilder:
        """Declare tags that are only legal when nested inside this block."""
        return self._set(
            declared_governs=self.definition.declared_governs | frozenset(names)
        )

    def same_syntax_as(self, name: str) -> BlockTagBuilder:
        """Reuse the branch/governance shape of an already registered tag."""
        target = self._registry.get(name)
        if target is None:
            raise RegistryError(
                f"Tag '{self.name}' cannot reuse the syntax of undefined tag '{name}'"
            )
        if target.name == self.name:
            raise RegistryError(f"Tag '{self.name}' cannot alias itself")
        return self._set(syntax_alias=target)

    def with_compiler(self, fn: TagCompiler) -> BlockTagBuilder:
        """Supply the function that turns a TagNode occurrence into a render step."""
        return self._set(compiler=fn)
