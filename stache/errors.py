"""
Base exception for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from StacheUserError.

Programming errors and bugs should NOT inherit from StacheUserError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class StacheUserError(Exception):
    """
    Base class for all user-facing errors in stache.

    These errors indicate problems that the user can fix:
    configuration issues, unknown pragmas, missing templates, etc.
    """
    pass


class InvalidEscaperError(StacheUserError, TypeError):
    """Raised when a non-callable is registered as the escaper."""

    def __init__(self, escaper: object):
        self.escaper = escaper
        super().__init__(f"Escaper must be callable, got {type(escaper).__name__}")


class UnregisteredPragmaError(StacheUserError):
    """Raised when a template activates a pragma nobody registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'No handler for pragma "{name}" registered; cannot proceed rendering')


class InvalidPartialsError(StacheUserError):
    """Raised when partials cannot be resolved or were passed in an unusable form."""
    pass


class InvalidTokensError(StacheUserError):
    """Raised when a template reference yields neither text nor tokens."""
    pass


class TemplateNotFoundError(StacheUserError):
    """Raised when no resolver knows the requested template."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Template by name "{name}" not found')


class LexerError(StacheUserError):
    """Malformed template text."""

    def __init__(self, message: str, line: int, column: int, template_name: Optional[str] = None):
        where = f"{template_name}:" if template_name else ""
        super().__init__(f"{message} at {where}{line}:{column}")
        self.line = line
        self.column = column
        self.template_name = template_name


class RenderDepthError(StacheUserError):
    """Raised when nested rendering exceeds the configured maximum depth."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(
            f"Maximum render depth of {max_depth} exceeded (self-referencing partial?)"
        )


class ConfigLoadError(StacheUserError, ValueError):
    """Configuration file could not be read or validated."""
    pass


__all__ = [
    "StacheUserError",
    "InvalidEscaperError",
    "UnregisteredPragmaError",
    "InvalidPartialsError",
    "InvalidTokensError",
    "TemplateNotFoundError",
    "LexerError",
    "RenderDepthError",
    "ConfigLoadError",
]
