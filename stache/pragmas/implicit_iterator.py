"""
IMPLICIT-ITERATOR pragma.

Gives access to the current item while iterating a list of scalars:

    {{%IMPLICIT-ITERATOR}}{{#items}}{{.}}{{/items}}

The marker name defaults to "." and can be changed with the ``iterator``
option: ``{{%IMPLICIT-ITERATOR iterator=item}}``.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .base import Pragma
from ..template.context import ContextKind, classify, is_scalar
from ..template.escaping import html_escape
from ..template.tokens import TokenKind

if TYPE_CHECKING:
    from ..manager import Stache

DEFAULT_ITERATOR = "."


class ImplicitIteratorPragma(Pragma):

    tokens_handled = frozenset({TokenKind.VARIABLE})

    @property
    def name(self) -> str:
        return "IMPLICIT-ITERATOR"

    def render(
        self,
        kind: TokenKind,
        data: Any,
        context: Any,
        options: Mapping[str, str],
        manager: Optional[Stache],
    ) -> Optional[str]:
        iterator = options.get("iterator") or DEFAULT_ITERATOR
        if data != iterator:
            return None

        if is_scalar(context):
            value = context
        elif isinstance(context, MappingABC) and iterator in context:
            # Single-entry wrapper built by the renderer around a non-scalar lookup
            value = context[iterator]
            if classify(value) in (ContextKind.OBJECT, ContextKind.MAP):
                return None
        else:
            return None

        if value is None or value is False:
            return None
        escape = manager.renderer.escape if manager is not None else html_escape
        return escape(value)


__all__ = ["ImplicitIteratorPragma", "DEFAULT_ITERATOR"]
