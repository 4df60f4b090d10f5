"""
Lexer for Mustache templates.

Turns template text into the token tree consumed by the renderer:

- scans tags with the current delimiters (switchable with {{=<% %>=}})
- drops "standalone" lines that hold nothing but a block-level tag
- nests section, inverted section and placeholder bodies
- resolves template inheritance ({{<parent}}) into a partial token that
  carries the parent's tokens with overridden placeholders
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

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
    TokenSequence,
    VariableRawToken,
    VariableToken,
)
from ..errors import InvalidPartialsError, LexerError

if TYPE_CHECKING:
    from ..manager import Stache

logger = logging.getLogger(__name__)

DEFAULT_OPEN = "{{"
DEFAULT_CLOSE = "}}"

# Sigils of tags that may stand alone on a line
_BLOCK_SIGILS = frozenset("#^$</>!%=")
# Sigils that open a nested body
_OPENING_SIGILS = frozenset("#^$<")
_TAG_SIGILS = _BLOCK_SIGILS | {"{", "&"}


@dataclass
class _Tag:
    """A scanned tag with the source positions needed for nesting."""
    sigil: str           # "" for plain variables
    body: str            # Tag text without sigil, stripped
    start: int           # Index of the opening delimiter
    before: int          # End of the text preceding the tag (after standalone trimming)
    after: int           # Index where scanning resumes
    line: int
    column: int


@dataclass
class _Frame:
    """An open block waiting for its closing tag."""
    tag: _Tag
    children: List[Token] = field(default_factory=list)


class Lexer:
    """
    Mustache lexer.

    Stateless between calls; one instance may be shared by a manager.
    """

    def compile(self, manager: Optional[Stache], template: str, template_name: Optional[str] = None) -> TokenSequence:
        """
        Compile template text into a token sequence.

        Args:
            manager: Template manager, needed only for template inheritance
            template: Template source text
            template_name: Name used in error messages

        Returns:
            Token tree

        Raises:
            LexerError: On unclosed or mismatched tags and invalid delimiters
        """
        scanner = _Scanner(template, template_name)
        root = _Frame(tag=_Tag("", "", 0, 0, 0, 1, 1))
        stack: List[_Frame] = [root]

        for item in scanner.scan():
            if isinstance(item, str):
                if item:
                    stack[-1].children.append(ContentToken(item))
                continue

            tag = item
            if tag.sigil in _OPENING_SIGILS:
                stack.append(_Frame(tag=tag))
            elif tag.sigil == "/":
                if len(stack) == 1:
                    raise scanner.error(f"Unexpected closing tag '{tag.body}'", tag)
                frame = stack.pop()
                if frame.tag.body != tag.body:
                    raise scanner.error(
                        f"Mismatched closing tag '{tag.body}', expected '{frame.tag.body}'", tag
                    )
                stack[-1].children.append(
                    self._close_block(manager, template, frame, tag)
                )
            else:
                stack[-1].children.append(self._leaf_token(tag, scanner))

        if len(stack) > 1:
            raise scanner.error(f"Unclosed section '{stack[-1].tag.body}'", stack[-1].tag)

        tokens = tuple(root.children)
        logger.debug(f"Compiled template '{template_name or '<text>'}' -> {len(tokens)} tokens")
        return tokens

    def _leaf_token(self, tag: _Tag, scanner: _Scanner) -> Token:
        sigil = tag.sigil
        if sigil == "":
            return VariableToken(tag.body)
        if sigil in ("{", "&"):
            return VariableRawToken(tag.body)
        if sigil == ">":
            return PartialToken(name=tag.body)
        if sigil == "!":
            return CommentToken(tag.body)
        if sigil == "%":
            return _parse_pragma(tag, scanner)
        if sigil == "=":
            open_, close = scanner.delimiters_from(tag)
            return DelimiterSetToken(open_, close)
        raise scanner.error(f"Unknown tag type '{sigil}'", tag)

    def _close_block(self, manager: Optional[Stache], template: str, frame: _Frame, closing: _Tag) -> Token:
        opening = frame.tag
        content = tuple(frame.children)
        if opening.sigil == "#":
            return SectionToken(
                name=opening.body,
                content=content,
                template=template[opening.after:closing.before],
            )
        if opening.sigil == "^":
            return InvertedSectionToken(name=opening.body, content=content)
        if opening.sigil == "$":
            return PlaceholderToken(name=opening.body, content=content)
        # "<": template inheritance
        if manager is None:
            raise InvalidPartialsError(
                f'Template inheritance from "{opening.body}" requires a template manager'
            )
        overrides = {
            t.name: t for t in content if isinstance(t, PlaceholderToken)
        }
        parent = manager.tokenize(opening.body)
        return PartialToken(tokens=substitute_placeholders(parent, overrides))


def substitute_placeholders(tokens: TokenSequence, overrides: Dict[str, PlaceholderToken]) -> TokenSequence:
    """Replace named placeholders anywhere in a token tree with overriding blocks."""
    if not overrides:
        return tokens
    result: List[Token] = []
    for token in tokens:
        if isinstance(token, PlaceholderToken):
            if token.name in overrides:
                result.append(PlaceholderToken(token.name, overrides[token.name].content))
            else:
                result.append(dataclasses.replace(
                    token, content=substitute_placeholders(token.content, overrides)
                ))
        elif isinstance(token, (SectionToken, InvertedSectionToken)):
            result.append(dataclasses.replace(
                token, content=substitute_placeholders(token.content, overrides)
            ))
        elif isinstance(token, PartialToken) and token.tokens is not None:
            result.append(PartialToken(tokens=substitute_placeholders(token.tokens, overrides)))
        else:
            result.append(token)
    return tuple(result)


def _parse_pragma(tag: _Tag, scanner: _Scanner) -> PragmaToken:
    parts = tag.body.split()
    if not parts:
        raise scanner.error("Pragma tag without a name", tag)
    options: Dict[str, str] = {}
    for part in parts[1:]:
        key, _, value = part.partition("=")
        options[key] = value
    return PragmaToken(name=parts[0], options=options)


class _Scanner:
    """Splits template text into text chunks and tags."""

    def __init__(self, template: str, template_name: Optional[str]):
        self.template = template
        self.template_name = template_name
        self.open = DEFAULT_OPEN
        self.close = DEFAULT_CLOSE

    def error(self, message: str, tag: _Tag) -> LexerError:
        return LexerError(message, tag.line, tag.column, self.template_name)

    def position(self, index: int) -> Tuple[int, int]:
        line = self.template.count("\n", 0, index) + 1
        column = index - (self.template.rfind("\n", 0, index) + 1) + 1
        return line, column

    def scan(self):
        """Yields text chunks (str) and tags (_Tag) in source order."""
        text = self.template
        pos = 0
        while True:
            start = text.find(self.open, pos)
            if start == -1:
                yield text[pos:]
                return

            tag = self._read_tag(start)
            if tag.sigil in _BLOCK_SIGILS:
                self._trim_standalone(tag)

            yield text[pos:tag.before]
            yield tag
            if tag.sigil == "=":
                self.open, self.close = self.delimiters_from(tag)
            pos = tag.after

    def _read_tag(self, start: int) -> _Tag:
        text = self.template
        inner = start + len(self.open)
        line, column = self.position(start)
        sigil = text[inner:inner + 1]

        if sigil == "{":
            end_marker = "}" + self.close
        elif sigil == "=":
            end_marker = "=" + self.close
        else:
            end_marker = self.close

        end = text.find(end_marker, inner + (1 if sigil in ("{", "=") else 0))
        if end == -1:
            raise LexerError(f"Unclosed tag '{self.open}'", line, column, self.template_name)

        raw = text[inner:end]
        if sigil in _TAG_SIGILS:
            body = raw[1:].strip()
        else:
            sigil = ""
            body = raw.strip()

        tag = _Tag(
            sigil=sigil,
            body=body,
            start=start,
            before=start,
            after=end + len(end_marker),
            line=line,
            column=column,
        )
        if not body and sigil not in ("!",):
            raise self.error("Empty tag", tag)
        return tag

    def _trim_standalone(self, tag: _Tag) -> None:
        text = self.template
        line_start = text.rfind("\n", 0, tag.start) + 1
        if text[line_start:tag.start].strip(" \t"):
            return
        line_end = text.find("\n", tag.after)
        rest_end = len(text) if line_end == -1 else line_end
        if text[tag.after:rest_end].strip(" \t\r"):
            return
        tag.before = line_start
        tag.after = len(text) if line_end == -1 else line_end + 1

    def delimiters_from(self, tag: _Tag) -> Tuple[str, str]:
        parts = tag.body.split()
        if len(parts) != 2 or any("=" in p for p in parts):
            raise self.error(f"Invalid delimiter specification '{tag.body}'", tag)
        return parts[0], parts[1]


__all__ = ["Lexer", "DEFAULT_OPEN", "DEFAULT_CLOSE", "substitute_placeholders"]
