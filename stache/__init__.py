"""
stache: Mustache templates with pragmas, partials and template inheritance.
"""

from __future__ import annotations

from .errors import StacheUserError
from .manager import Stache
from .pragmas import Pragma, PragmaCollection
from .template import Lexer, Renderer, TokenKind

__all__ = [
    "Stache",
    "StacheUserError",
    "Pragma",
    "PragmaCollection",
    "Lexer",
    "Renderer",
    "TokenKind",
]
