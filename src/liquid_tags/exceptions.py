"""
Exceptions raised while registering, compiling and rendering tags.

Compile-time problems (`CompileError`) abort compilation of the whole
template. Render-time problems (`RenderError`) abort the tag being rendered
and propagate to the caller. `RegistryError` is a startup fault.
"""

from __future__ import annotations


class LiquidError(Exception):
    """Base class for template errors."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line:
            return f"line {self.line}: {self.message}"
        return self.message


class CompileError(LiquidError):
    """Malformed expression or tag structure."""


class RenderError(LiquidError):
    """Failure while evaluating an expression or rendering a tag body."""


class UndefinedVariableError(RenderError):
    """An undefined variable was referenced while `strict_variables` is on."""

    def __init__(self, name: str, *, line: int | None = None) -> None:
        super().__init__(f"Undefined variable '{name}'", line=line)
        self.name = name


class RegistryError(LiquidError):
    """Invalid tag registration (duplicate name, unknown alias, frozen registry)."""


class LoopSignal(Exception):
    """
    Control transfer raised by loop-scoped tags.

    These are not errors: the loop engine that owns the enclosing `for` /
    `tablerow` catches them.
    """

    tag_name = ""


class BreakSignal(LoopSignal):
    tag_name = "break"


class ContinueSignal(LoopSignal):
    tag_name = "continue"
