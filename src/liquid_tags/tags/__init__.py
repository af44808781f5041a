"""
Standard tag definitions.
"""

from __future__ import annotations

from functools import lru_cache

from ..overrides import LOOP_SIGNAL_TAGS
from ..overrides import LOOP_TAGS
from ..registry import TagRegistry
from ..types import TagKind
from .control_flow import compile_capture
from .control_flow import compile_case
from .control_flow import if_tag_compiler
from .loops import break_tag
from .loops import continue_tag
from .loops import compile_cycle


def define_standard_tags(registry: TagRegistry) -> TagRegistry:
    """
    Register the standard tags on `registry`.

    `comment` and `raw` have no compiler: their bodies are opaque and the
    renderer skips or emits them. `for` and `tablerow` are declared for their
    grammar only; their iteration belongs to the loop engine.
    """
    registry.define_simple_tag("break", break_tag, kind=TagKind.SIGNAL)
    registry.define_simple_tag("continue", continue_tag, kind=TagKind.SIGNAL)
    registry.define_simple_tag("cycle", kind=TagKind.SIGNAL, compiler=compile_cycle)
    registry.define_block_tag("capture").with_compiler(compile_capture)
    registry.define_block_tag("case").branch("when").with_compiler(compile_case)
    registry.define_block_tag("comment")
    registry.define_block_tag("if").branch("else").branch("elsif").with_compiler(
        if_tag_compiler(True)
    )
    registry.define_block_tag("raw")
    for name in LOOP_TAGS:
        registry.define_block_tag(name).governs(LOOP_SIGNAL_TAGS)
    registry.define_block_tag("unless").same_syntax_as("if").with_compiler(
        if_tag_compiler(False)
    )
    return registry


def standard_registry() -> TagRegistry:
    """A new, frozen registry holding the standard tags."""
    return define_standard_tags(TagRegistry()).freeze()


@lru_cache(maxsize=None)
def default_registry() -> TagRegistry:
    """Process-wide standard registry, built on first use."""
    return standard_registry()
