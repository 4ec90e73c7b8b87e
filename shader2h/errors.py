"""
Exceptions and error handling for the shader header generator.

This module defines the exceptions raised while compiling a shader, reading its
reflection data and translating it into a header. Every failure is terminal for
the current invocation; the CLI logs the message and exits with a non-zero code.
"""

from pathlib import Path
from typing import Any


class Shader2hError(Exception):
    """Base class for every failure raised by shader2h.

    Examples:
        >>> raise Shader2hError("Something went wrong")
        Shader2hError: Something went wrong
    """

    def __init__(self, message: str, context: Any | None = None):
        """Initialize the exception with a message and optional context.

        Args:
            message: The error message
            context: Optional extra information shown after the message
        """
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            return f"{self.message}\n{self.context}"
        return self.message


class FrontEndError(Shader2hError):
    """The shader source failed to preprocess, parse or link.

    The compiler diagnostic is carried unchanged in ``diagnostic``.
    """

    def __init__(self, message: str, diagnostic: str = ""):
        super().__init__(message, diagnostic.rstrip() or None)
        self.diagnostic = diagnostic


class ReflectionError(Shader2hError):
    """The linked program could not produce a usable reflection view."""


class UnsupportedTypeError(Shader2hError):
    """A reflected type has a basic kind the translator cannot lay out."""

    def __init__(self, type_name: str, field_name: str | None = None):
        message = f"Unsupported shader type '{type_name}'"
        if field_name:
            message += f" for field '{field_name}'"
        super().__init__(message)
        self.type_name = type_name
        self.field_name = field_name

    def in_struct(self, struct_name: str) -> "UnsupportedTypeError":
        """Return a copy of the error that also names the enclosing struct."""
        error = UnsupportedTypeError(self.type_name, self.field_name)
        error.context = f"in struct '{struct_name}'"
        return error


class MissingStageError(Shader2hError):
    """The requested stage has no compiled representation."""

    def __init__(self, stage: str, available: list[str] | None = None):
        message = f"No compiled code for stage '{stage}'"
        context = None
        if available:
            context = f"Available stages: {', '.join(available)}"
        super().__init__(message, context)
        self.stage = stage


class ShaderIOError(Shader2hError):
    """A file could not be read or written."""

    def __init__(self, message: str, path: Path | str):
        super().__init__(f"{message}: {path}")
        self.path = Path(path)
