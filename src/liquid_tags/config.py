from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RenderConfig:
    # Undefined root variables raise UndefinedVariableError instead of nil.
    strict_variables: bool = False
    # Tokenize with the regex lexer instead of Django's DebugLexer.
    force_fallback_lexer: bool = False
