"""
Token model.

Immutable token vocabulary emitted by the lexer and interpreted by the
renderer. Section-like tokens carry their nested token sequence, so a
compiled template is a tree rather than a flat stream.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple


class TokenKind(enum.Enum):
    """Token kinds. Pragmas declare which of these they intercept."""
    CONTENT = "content"
    VARIABLE = "variable"
    VARIABLE_RAW = "variable_raw"
    SECTION = "section"
    INVERTED_SECTION = "inverted_section"
    PLACEHOLDER = "placeholder"
    PARTIAL = "partial"
    PRAGMA = "pragma"
    DELIMITER_SET = "delimiter_set"
    COMMENT = "comment"


@dataclass(frozen=True)
class Token:
    """Base class for all tokens."""
    kind: ClassVar[TokenKind]


# Compiled template: a complete, independently renderable sequence
TokenSequence = Tuple[Token, ...]


@dataclass(frozen=True)
class ContentToken(Token):
    """Literal text, emitted verbatim."""
    kind: ClassVar[TokenKind] = TokenKind.CONTENT
    text: str


@dataclass(frozen=True)
class VariableToken(Token):
    """Escaped value substitution: {{name}}."""
    kind: ClassVar[TokenKind] = TokenKind.VARIABLE
    name: str


@dataclass(frozen=True)
class VariableRawToken(Token):
    """Unescaped value substitution: {{{name}}} or {{&name}}."""
    kind: ClassVar[TokenKind] = TokenKind.VARIABLE_RAW
    name: str


@dataclass(frozen=True)
class SectionToken(Token):
    """
    Conditional or repeated block: {{#name}}...{{/name}}.

    ``template`` keeps the unparsed source between the opening and closing
    tags; higher-order sections receive it instead of the compiled content.
    """
    kind: ClassVar[TokenKind] = TokenKind.SECTION
    name: str
    content: TokenSequence = ()
    template: str = ""


@dataclass(frozen=True)
class InvertedSectionToken(Token):
    """Block rendered only for falsy values: {{^name}}...{{/name}}."""
    kind: ClassVar[TokenKind] = TokenKind.INVERTED_SECTION
    name: str
    content: TokenSequence = ()


@dataclass(frozen=True)
class PlaceholderToken(Token):
    """
    Structural block: {{$name}}...{{/name}}.

    Always rendered against the current context. The name only matters to
    template inheritance, where a child template substitutes the block.
    """
    kind: ClassVar[TokenKind] = TokenKind.PLACEHOLDER
    name: str = ""
    content: TokenSequence = ()


@dataclass(frozen=True)
class PartialToken(Token):
    """
    Spliced sub-template.

    Either ``name`` refers to a template resolved at render time, or
    ``tokens`` holds an already resolved sequence. Never both.
    """
    kind: ClassVar[TokenKind] = TokenKind.PARTIAL
    name: Optional[str] = None
    tokens: Optional[TokenSequence] = None

    def __post_init__(self):
        if (self.name is None) == (self.tokens is None):
            raise ValueError("PartialToken requires exactly one of 'name' or 'tokens'")


@dataclass(frozen=True)
class PragmaToken(Token):
    """Activates a named extension: {{%NAME key=value}}."""
    kind: ClassVar[TokenKind] = TokenKind.PRAGMA
    name: str
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DelimiterSetToken(Token):
    """Delimiter switch: {{=<% %>=}}. No-op at render time."""
    kind: ClassVar[TokenKind] = TokenKind.DELIMITER_SET
    open: str
    close: str


@dataclass(frozen=True)
class CommentToken(Token):
    """Comment: {{! text}}. No-op at render time."""
    kind: ClassVar[TokenKind] = TokenKind.COMMENT
    text: str = ""


def token_to_dict(token: Token) -> Dict[str, Any]:
    """Plain, JSON-serializable view of a token (recursive)."""
    out: Dict[str, Any] = {"kind": token.kind.value}
    for f in fields(token):
        value = getattr(token, f.name)
        if isinstance(value, tuple):
            value = dump_tokens(value)
        elif isinstance(value, Mapping):
            value = dict(value)
        out[f.name] = value
    return out


def dump_tokens(tokens: TokenSequence) -> List[Dict[str, Any]]:
    return [token_to_dict(t) for t in tokens]


__all__ = [
    "TokenKind",
    "Token",
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
    "token_to_dict",
    "dump_tokens",
]
