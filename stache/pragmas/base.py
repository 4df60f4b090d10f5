"""
Pragma interface.

A pragma is a named extension that a template activates with
``{{%NAME key=value}}``. While active, the renderer offers it every token
of a kind it declares; a non-empty result replaces the default rendering
of that token.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, FrozenSet, Mapping, Optional

from ..template.tokens import TokenKind

if TYPE_CHECKING:
    from ..manager import Stache


class Pragma(ABC):
    """
    Base class for pragmas.

    Subclasses set ``tokens_handled`` and implement ``render``. Returning
    None or an empty string means "not handled": the renderer then asks
    the next active pragma, and finally falls back to default semantics.
    """

    tokens_handled: ClassVar[FrozenSet[TokenKind]] = frozenset()

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used in the template's pragma tag."""
        pass

    def handles_token(self, kind: TokenKind) -> bool:
        return kind in self.tokens_handled

    @abstractmethod
    def render(
        self,
        kind: TokenKind,
        data: Any,
        context: Any,
        options: Mapping[str, str],
        manager: Optional[Stache],
    ) -> Optional[str]:
        """
        Render a token.

        Args:
            kind: Kind of the token being rendered
            data: Token payload: the text for content tokens, the name for
                  variable tokens, the token itself otherwise
            context: Context the token is rendered against
            options: Options given in the pragma tag
            manager: Template manager (escaping, tokenizing), if attached

        Returns:
            Rendered text, or None/"" to decline
        """
        pass


__all__ = ["Pragma"]
