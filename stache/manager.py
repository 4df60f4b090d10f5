"""
Template manager.

Entry point of the library: resolves templates by name through the
resolver chain, compiles and caches their tokens, owns the pragma
registry and hands compiled templates to the renderer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from .errors import InvalidPartialsError, InvalidTokensError, TemplateNotFoundError
from .pragmas import PragmaCollection, default_pragmas
from .resolver import AggregateResolver, DefaultResolver
from .template.lexer import DEFAULT_OPEN, Lexer
from .template.renderer import Renderer
from .template.tokens import Token, TokenSequence

if TYPE_CHECKING:
    from .config import StacheConfig

logger = logging.getLogger(__name__)


class Stache:
    """
    Mustache template manager.

    Token caching is per instance: templates fetched by name are cached under
    that name, and partials passed to ``render`` under their alias. Use
    ``get_all_tokens``/``restore_tokens`` to move the cache between instances,
    or a fresh instance for isolated renders.
    """

    def __init__(self, resolver: Optional[AggregateResolver] = None):
        self._resolver = resolver
        self._lexer: Optional[Lexer] = None
        self._renderer: Optional[Renderer] = None
        self._cached_templates: Dict[str, TokenSequence] = {}
        self.pragmas: PragmaCollection = default_pragmas()

    @classmethod
    def from_config(cls, config: StacheConfig) -> Stache:
        """Build a manager from a loaded configuration."""
        from .config import apply_config
        manager = cls()
        apply_config(manager, config)
        return manager

    # ------------------------------ components ----------------------------- #

    @property
    def lexer(self) -> Lexer:
        if self._lexer is None:
            self._lexer = Lexer()
        return self._lexer

    def set_lexer(self, lexer: Lexer) -> Stache:
        self._lexer = lexer
        return self

    @property
    def renderer(self) -> Renderer:
        if self._renderer is None:
            self._renderer = Renderer(self)
        return self._renderer

    def set_renderer(self, renderer: Renderer) -> Stache:
        renderer.set_manager(self)
        self._renderer = renderer
        return self

    @property
    def resolver(self) -> AggregateResolver:
        if self._resolver is None:
            self._resolver = AggregateResolver()
            self._resolver.attach(DefaultResolver(), 0)
        return self._resolver

    @property
    def default_resolver(self) -> DefaultResolver:
        """The filesystem resolver of the chain, attached on demand."""
        found = self.resolver.fetch_by_type(DefaultResolver)
        if found is None:
            found = DefaultResolver()
            self.resolver.attach(found, 0)
        return found

    # ------------------------------ operations ----------------------------- #

    def render(self, template: str, view: Any, partials: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template.

        Args:
            template: Template text, or the name of a template known to the resolvers
            view: Data to render against
            partials: Alias → template (text, name or compiled tokens) used for {{>alias}}

        Returns:
            Rendered text

        Raises:
            InvalidPartialsError: If ``partials`` is not a mapping or holds an unusable entry
        """
        tokenized_partials: Dict[str, TokenSequence] = {}
        if partials is not None:
            if not isinstance(partials, MappingABC):
                raise InvalidPartialsError(
                    f"Partials must be a mapping of alias to template, got {type(partials).__name__}"
                )
            for alias, partial_template in partials.items():
                if isinstance(partial_template, str):
                    tokenized_partials[alias] = self.tokenize(partial_template)
                elif isinstance(partial_template, (list, tuple)) and all(
                    isinstance(t, Token) for t in partial_template
                ):
                    tokenized_partials[alias] = tuple(partial_template)
                else:
                    raise InvalidPartialsError(
                        f"Partial '{alias}' must be template text, a template name or tokens, "
                        f"got {type(partial_template).__name__}"
                    )
                # Cache under the alias as well
                self._cached_templates[alias] = tokenized_partials[alias]

        tokens = self.tokenize(template)
        return self.renderer.render(tokens, view, tokenized_partials)

    def tokenize(self, template: str, cache_tokens: bool = True) -> TokenSequence:
        """
        Tokenize a template given as text or by name.

        Text containing the opening delimiter is compiled directly and never
        cached; anything else is treated as a template name.
        """
        if DEFAULT_OPEN in template:
            return self.compile(template)

        if cache_tokens and template in self._cached_templates:
            logger.debug(f"Token cache hit for '{template}'")
            return self._cached_templates[template]

        logger.debug(f"Token cache miss for '{template}'")
        fetched = self._fetch_template(template)
        if isinstance(fetched, str):
            tokens = self.lexer.compile(self, fetched, template)
        elif isinstance(fetched, (list, tuple)) and all(isinstance(t, Token) for t in fetched):
            tokens = tuple(fetched)
        else:
            raise InvalidTokensError(
                f"Unable to either retrieve or compile tokens for '{template}'"
            )

        if cache_tokens:
            self._cached_templates[template] = tokens
        return tokens

    def compile(self, text: str, template_name: Optional[str] = None) -> TokenSequence:
        """Compile template text without any name lookup or caching."""
        return self.lexer.compile(self, text, template_name)

    def get_all_tokens(self) -> Dict[str, TokenSequence]:
        """Name → tokens for every template cached by this instance."""
        return dict(self._cached_templates)

    def restore_tokens(self, tokens: Mapping[str, TokenSequence]) -> Stache:
        """Seed the token cache, typically from another instance's ``get_all_tokens``."""
        self._cached_templates = {name: tuple(seq) for name, seq in tokens.items()}
        return self

    def _fetch_template(self, name: str) -> Any:
        content = self.resolver.resolve(name)
        if not content:
            raise TemplateNotFoundError(name)
        return content


__all__ = ["Stache"]
