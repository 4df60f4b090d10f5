"""
Template core: token model, value resolution, lexer and renderer.
"""

from __future__ import annotations

from .context import ContextKind, classify, resolve_value
from .escaping import html_escape, no_escape
from .lexer import Lexer
from .renderer import Renderer
from .tokens import (
    CommentToken,
    ContentToken,
    DelimiterSetToken,
    InvertedSectionToken,
    PartialToken,
    PlaceholderToken,
    PragmaToken,
    SectionToken,
    Token,
    TokenKind,
    TokenSequence,
    VariableRawToken,
    VariableToken,
)

__all__ = [
    "ContextKind",
    "classify",
    "resolve_value",
    "html_escape",
    "no_escape",
    "Lexer",
    "Renderer",
    "Token",
    "TokenKind",
    "TokenSequence",
    "ContentToken",
    "VariableToken",
    "VariableRawToken",
    "SectionToken",
    "InvertedSectionToken",
    "PlaceholderToken",
    "PartialToken",
    "PragmaToken",
    "DelimiterSetToken",
    "CommentToken",
]
