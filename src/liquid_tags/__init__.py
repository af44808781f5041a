"""
Liquid control-flow tags - registration, compilation and rendering.

This library defines how `if`/`unless`, `case`/`when`, `capture` and the
loop-scoped `break`/`continue`/`cycle` tags are registered, compiled from a
parsed tag tree into render steps, and evaluated against a render context.
"""

from __future__ import annotations

from .template import Template
from .template import parse_template

__all__ = ["Template", "parse_template"]
