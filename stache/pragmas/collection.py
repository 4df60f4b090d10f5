"""
Registry of pragma implementations, keyed by pragma name.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List

from .base import Pragma
from ..errors import UnregisteredPragmaError

logger = logging.getLogger(__name__)


class PragmaCollection:
    """Ordered name → pragma mapping owned by the template manager."""

    def __init__(self, pragmas: List[Pragma] | None = None):
        self._pragmas: Dict[str, Pragma] = {}
        for pragma in pragmas or []:
            self.add(pragma)

    def add(self, pragma: Pragma) -> None:
        if not isinstance(pragma, Pragma):
            raise TypeError(f"Expected a Pragma instance, got {type(pragma).__name__}")
        if pragma.name in self._pragmas:
            logger.warning(f"Pragma '{pragma.name}' overwrites existing registration")
        self._pragmas[pragma.name] = pragma

    def has(self, name: str) -> bool:
        return name in self._pragmas

    def get(self, name: str) -> Pragma:
        """
        Returns the pragma registered under ``name``.

        Raises:
            UnregisteredPragmaError: If nothing is registered under that name
        """
        try:
            return self._pragmas[name]
        except KeyError:
            raise UnregisteredPragmaError(name) from None

    def remove(self, name: str) -> None:
        self._pragmas.pop(name, None)

    def names(self) -> List[str]:
        return list(self._pragmas)

    def __contains__(self, name: object) -> bool:
        return name in self._pragmas

    def __iter__(self) -> Iterator[Pragma]:
        return iter(list(self._pragmas.values()))

    def __len__(self) -> int:
        return len(self._pragmas)


__all__ = ["PragmaCollection"]
