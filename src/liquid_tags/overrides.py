"""
Centralized defaults for tags whose behaviour is not expressed through a
compiler function.

Goal:
- Keep hard-coded tag behaviour out of the tokenizer and renderer.
- Make it obvious where to extend it when embedding the library in a host
  with its own opaque tags.
"""

from __future__ import annotations

from .types import OpaqueBlockSpec

# Block tags whose inner content is never parsed. The tokenizer turns every
# token inside them into text; the renderer uses `kind` to decide whether the
# text is emitted ("raw") or dropped ("comment").
DEFAULT_OPAQUE_BLOCKS: dict[str, OpaqueBlockSpec] = {
    "raw": OpaqueBlockSpec(end_tags=("endraw",), kind="raw"),
    "comment": OpaqueBlockSpec(end_tags=("endcomment",), kind="comment"),
}

# Tags that only make sense inside a loop.
LOOP_SIGNAL_TAGS: tuple[str, ...] = ("break", "continue", "cycle")

# Block tags that own loop iteration (rendered by the loop engine).
LOOP_TAGS: tuple[str, ...] = ("for", "tablerow")
