"""
Token renderer.

Walks a compiled token sequence against a context, performing
substitutions and branching on token kind and on the shape of the values
found in the context.

Per-call state (the active pragma set, recursion depth) lives in a
``_RenderState`` created for each top-level ``render`` call and handed
down explicitly, so a single Renderer can serve concurrent renders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from .context import (
    ContextKind,
    EMPTY,
    classify,
    invoke,
    is_safe_callback,
    is_scalar,
    iterate,
    resolve_value,
)
from .escaping import Escaper, html_escape
from .tokens import (
    ContentToken,
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
from ..errors import (
    InvalidEscaperError,
    InvalidPartialsError,
    InvalidTokensError,
    RenderDepthError,
    UnregisteredPragmaError,
)

if TYPE_CHECKING:
    from ..manager import Stache

logger = logging.getLogger(__name__)

# Pragma name → options, in activation order
ActivePragmas = Dict[str, Mapping[str, str]]
PartialsMap = Mapping[str, TokenSequence]


@dataclass
class _RenderState:
    """State of one render call; children are derived, never shared."""
    view: Any
    partials: PartialsMap
    active: ActivePragmas = field(default_factory=dict)
    depth: int = 0

    @property
    def in_loop(self) -> bool:
        # Iterating a list of scalars: no nested scopes can be opened
        return is_scalar(self.view)

    def descend(self, view: Any, active: Optional[ActivePragmas] = None) -> _RenderState:
        return _RenderState(
            view=view,
            partials=self.partials,
            active=dict(self.active if active is None else active),
            depth=self.depth + 1,
        )


def _token_data(token: Token) -> Any:
    if isinstance(token, ContentToken):
        return token.text
    if isinstance(token, (VariableToken, VariableRawToken)):
        return token.name
    return token


class Renderer:
    """
    Mustache renderer.

    The manager is needed for pragmas, name-based partials and
    higher-order sections; plain templates render without one.
    """

    def __init__(
        self,
        manager: Optional[Stache] = None,
        escaper: Optional[Escaper] = None,
        max_depth: Optional[int] = None,
    ):
        self._manager = manager
        self._escaper: Optional[Escaper] = None
        if escaper is not None:
            self.set_escaper(escaper)
        self.max_depth = max_depth

        self._handlers: Dict[TokenKind, Callable[[Any, _RenderState], str]] = {
            TokenKind.CONTENT: self._render_content,
            TokenKind.VARIABLE: self._render_variable,
            TokenKind.VARIABLE_RAW: self._render_variable_raw,
            TokenKind.SECTION: self._render_section,
            TokenKind.INVERTED_SECTION: self._render_inverted_section,
            TokenKind.PLACEHOLDER: self._render_placeholder,
            TokenKind.PARTIAL: self._render_partial,
            TokenKind.PRAGMA: self._register_pragma,
        }

    # ---------------------------- configuration ---------------------------- #

    @property
    def manager(self) -> Optional[Stache]:
        return self._manager

    def set_manager(self, manager: Stache) -> Renderer:
        self._manager = manager
        return self

    def set_escaper(self, escaper: Escaper) -> Renderer:
        """
        Replace the escaping function used for {{variable}} output.

        Raises:
            InvalidEscaperError: If ``escaper`` is not callable
        """
        if not callable(escaper):
            raise InvalidEscaperError(escaper)
        self._escaper = escaper
        return self

    def get_escaper(self) -> Escaper:
        if self._escaper is None:
            self._escaper = html_escape
        return self._escaper

    def escape(self, value: Any) -> str:
        return self.get_escaper()(value)

    # ------------------------------ rendering ------------------------------ #

    def render(self, tokens: TokenSequence, view: Any, partials: Optional[PartialsMap] = None) -> str:
        """
        Render a token sequence against a view.

        Args:
            tokens: Compiled template
            view: Root context
            partials: Alias name → compiled partial; consulted before the manager

        Returns:
            Rendered text
        """
        if isinstance(tokens, (str, bytes)) or not all(isinstance(t, Token) for t in tokens):
            raise InvalidTokensError("Renderer expects a sequence of tokens")
        state = _RenderState(view=view, partials=dict(partials or {}))
        return self._render_state(tokens, state)

    def _render_state(self, tokens: TokenSequence, state: _RenderState) -> str:
        if self.max_depth is not None and state.depth > self.max_depth:
            raise RenderDepthError(self.max_depth)

        parts = []
        for token in tokens:
            value = self._handle_pragmas(token.kind, _token_data(token), state.view, state.active)
            if value:
                parts.append(value)
                continue
            handler = self._handlers.get(token.kind)
            if handler is None:
                # Delimiter changes and comments only matter to the lexer
                continue
            rendered = handler(token, state)
            if rendered:
                parts.append(rendered)
        return "".join(parts)

    def _render_content(self, token: ContentToken, state: _RenderState) -> str:
        return token.text

    def _render_variable(self, token: VariableToken, state: _RenderState) -> str:
        value = resolve_value(token.name, state.view)
        if is_scalar(value):
            if value is None or value is False or value == EMPTY:
                return EMPTY
            return self.escape(value)

        # Give pragmas a chance to handle collection-valued lookups
        handled = self._handle_pragmas(
            TokenKind.VARIABLE, token.name, {token.name: value}, state.active
        )
        if handled:
            return handled
        return str(value)

    def _render_variable_raw(self, token: VariableRawToken, state: _RenderState) -> str:
        value = resolve_value(token.name, state.view)
        if value is None or value is False:
            return EMPTY
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return str(value)

    def _render_section(self, token: SectionToken, state: _RenderState) -> str:
        if state.in_loop:
            return EMPTY

        section = resolve_value(token.name, state.view)
        if not section:
            return EMPTY

        if section is True:
            return self._render_state(token.content, state.descend(state.view))

        kind = classify(section)
        if kind is ContextKind.LIST:
            # Each item gets its own pragma snapshot
            return "".join(
                self._render_state(token.content, state.descend(item))
                for item in iterate(section)
            )
        if kind is ContextKind.MAP:
            return self._render_state(token.content, state.descend(section))
        if kind is ContextKind.CALLABLE and is_safe_callback(section):
            return self._render_lambda(section, token, state)
        if kind is ContextKind.OBJECT:
            return self._render_state(token.content, state.descend(section))

        # Truthy scalars and opaque values keep the enclosing view
        return self._render_state(token.content, state.descend(state.view))

    def _render_lambda(self, callback: Any, token: SectionToken, state: _RenderState) -> str:
        """Higher-order section: the callback receives the raw text and a render helper."""

        def render_text(text: str) -> str:
            manager = self._manager
            if manager is None:
                return text
            return self._render_state(manager.compile(text), state.descend(state.view))

        logger.debug(f"Invoking higher-order section '{token.name}'")
        result = invoke(callback, token.template, render_text)
        if result is None:
            return EMPTY
        return str(result)

    def _render_inverted_section(self, token: InvertedSectionToken, state: _RenderState) -> str:
        if state.in_loop:
            return EMPTY
        if resolve_value(token.name, state.view):
            return EMPTY
        return self._render_state(token.content, state.descend(state.view))

    def _render_placeholder(self, token: PlaceholderToken, state: _RenderState) -> str:
        if state.in_loop:
            return EMPTY
        child = state.descend(state.view)
        rendered = self._render_state(token.content, child)
        # Pragmas activated inside a placeholder stay active after it
        state.active = child.active
        return rendered

    def _render_partial(self, token: PartialToken, state: _RenderState) -> str:
        if state.in_loop:
            return EMPTY

        if token.tokens is not None:
            tokens = token.tokens
        elif token.name in state.partials:
            logger.debug(f"Rendering aliased partial '{token.name}'")
            tokens = state.partials[token.name]
        else:
            manager = self._manager
            if manager is None:
                raise InvalidPartialsError(f'Unable to resolve partial "{token.name}"')
            logger.debug(f"Resolving partial '{token.name}' through the manager")
            tokens = manager.tokenize(token.name)

        # A partial starts with a clean pragma slate
        return self._render_state(tokens, state.descend(state.view, active={}))

    def _register_pragma(self, token: PragmaToken, state: _RenderState) -> str:
        manager = self._manager
        if manager is None or not manager.pragmas.has(token.name):
            raise UnregisteredPragmaError(token.name)
        logger.debug(f"Activating pragma '{token.name}' with options {dict(token.options)}")
        state.active[token.name] = token.options
        return EMPTY

    def _handle_pragmas(
        self,
        kind: TokenKind,
        data: Any,
        view: Any,
        active: ActivePragmas,
    ) -> Optional[str]:
        """
        Offer a token to the active pragmas, in activation order.

        Returns the first non-empty result, or None when no pragma handled it.
        """
        if not active or self._manager is None:
            return None
        registry = self._manager.pragmas
        for name, options in list(active.items()):
            pragma = registry.get(name)
            if not pragma.handles_token(kind):
                continue
            value = pragma.render(kind, data, view, options, self._manager)
            if value:
                return value
        return None


__all__ = ["Renderer", "ActivePragmas", "PartialsMap"]
