"""
Pragmas: named extensions that override token rendering within a scope.
"""

from __future__ import annotations

from .base import Pragma
from .collection import PragmaCollection
from .implicit_iterator import ImplicitIteratorPragma


def default_pragmas() -> PragmaCollection:
    """Collection with the built-in pragmas registered."""
    return PragmaCollection([ImplicitIteratorPragma()])


__all__ = ["Pragma", "PragmaCollection", "ImplicitIteratorPragma", "default_pragmas"]
