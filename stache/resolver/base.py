"""
Template resolver interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class Resolver(ABC):
    """Maps a template name to its source text."""

    @abstractmethod
    def resolve(self, name: str) -> Optional[str]:
        """
        Returns the template text, or None when this resolver does not know the name.
        """
        pass


__all__ = ["Resolver"]
