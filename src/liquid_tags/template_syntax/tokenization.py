"""
Template tokenization.

Splits template source into text, `{% ... %}` (block) and `{{ ... }}` (var)
tokens. Django's `DebugLexer` recognises the same delimiters, and its token
positions let opaque regions (`raw`, `comment`) keep their exact source text.
A regex fallback produces the same stream without Django's lexer. Both
follow Django's grammar, so markup spanning a newline stays literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from django.template.base import DebugLexer
from django.template.base import TokenType

from ..overrides import DEFAULT_OPAQUE_BLOCKS
from ..types import OpaqueBlockSpec
from ..types import resolve_opaque_blocks


@dataclass(frozen=True, slots=True)
class TemplateToken:
    """
    A single template token.

    Notes:
    - `contents` has no delimiters for block/var tokens; for text tokens it is
      the text itself.
    - `split` matches Django's `Token.split_contents()` for block tokens.
    - `source` is the exact source text, delimiters included.
    - Tokens inside opaque regions are reported as text, except the matching
      end tag that closes the region.
    """

    kind: Literal["text", "block", "var"]
    line: int
    contents: str
    source: str = ""
    split: list[str] | None = None
    name: str | None = None

    @property
    def parameters(self) -> str:
        """Block token contents after the tag name."""
        if self.kind != "block" or not self.name:
            return ""
        return self.contents[len(self.name) :].strip()


def tokenize_template(
    template: str,
    *,
    force_fallback: bool = False,
    opaque_blocks: dict[str, OpaqueBlockSpec] | None = None,
) -> list[TemplateToken]:
    """
    Tokenize a template into text/block/var tokens, honoring opaque blocks.
    """
    opaque_blocks = resolve_opaque_blocks(opaque_blocks, defaults=DEFAULT_OPAQUE_BLOCKS)
    if force_fallback:
        raw_tokens = _fallback_tokens(template)
    else:
        raw_tokens = _django_tokens(template)

    out: list[TemplateToken] = []
    opaque_stack: list[OpaqueBlockSpec] = []

    for tok in raw_tokens:
        if opaque_stack:
            spec = opaque_stack[-1]
            if tok.kind == "block" and tok.name in spec.end_tags:
                out.append(tok)
                opaque_stack.pop()
            else:
                out.append(
                    TemplateToken(
                        kind="text",
                        line=tok.line,
                        contents=tok.source,
                        source=tok.source,
                    )
                )
            continue

        out.append(tok)
        if tok.kind == "block" and tok.name:
            spec = opaque_blocks.get(tok.name)
            if spec:
                opaque_stack.append(spec)

    return out


def _django_tokens(template: str) -> list[TemplateToken]:
    out: list[TemplateToken] = []
    for token in DebugLexer(template).tokenize():
        start, end = token.position
        source = template[start:end]
        if token.token_type == TokenType.BLOCK:
            bits = token.split_contents()
            if not bits:
                out.append(
                    TemplateToken(
                        kind="text", line=token.lineno, contents=source, source=source
                    )
                )
                continue
            out.append(
                TemplateToken(
                    kind="block",
                    line=token.lineno,
                    contents=token.contents,
                    source=source,
                    split=bits,
                    name=bits[0],
                )
            )
        elif token.token_type == TokenType.VAR:
            out.append(
                TemplateToken(
                    kind="var",
                    line=token.lineno,
                    contents=token.contents,
                    source=source,
                )
            )
        else:
            # TEXT, and `{# ... #}` which has no meaning here.
            out.append(
                TemplateToken(
                    kind="text", line=token.lineno, contents=source, source=source
                )
            )
    return out


# Same grammar as `django.template.base.tag_re`: markup never spans lines.
_TAG_RE = re.compile(r"(\{%.*?%\}|\{\{.*?\}\}|\{#.*?#\})")


def _fallback_tokens(template: str) -> list[TemplateToken]:
    out: list[TemplateToken] = []
    last = 0

    def _text(start: int, end: int) -> None:
        if start < end:
            text = template[start:end]
            line = template.count("\n", 0, start) + 1
            out.append(TemplateToken(kind="text", line=line, contents=text, source=text))

    for match in _TAG_RE.finditer(template):
        _text(last, match.start())
        last = match.end()
        tok = match.group(0)
        line = template.count("\n", 0, match.start()) + 1
        content = tok[2:-2].strip()

        if tok.startswith("{#"):
            out.append(TemplateToken(kind="text", line=line, contents=tok, source=tok))
            continue

        if tok.startswith("{%"):
            bits = _split_tokens(content)
            if not bits:
                out.append(TemplateToken(kind="text", line=line, contents=tok, source=tok))
                continue
            out.append(
                TemplateToken(
                    kind="block",
                    line=line,
                    contents=content,
                    source=tok,
                    split=bits,
                    name=bits[0],
                )
            )
            continue

        out.append(TemplateToken(kind="var", line=line, contents=content, source=tok))

    _text(last, len(template))
    return out


def _split_tokens(content: str) -> list[str]:
    """
    Split tag content into tokens, respecting quotes.

    Handles: {% tag "arg with spaces" other_arg %}
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    quote_char: str | None = None

    for char in content:
        if char in ('"', "'") and not in_quotes:
            in_quotes = True
            quote_char = char
            current.append(char)
        elif char == quote_char and in_quotes:
            in_quotes = False
            current.append(char)
            quote_char = None
        elif char.isspace() and not in_quotes:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))

    return tokens
