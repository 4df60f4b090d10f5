"""
Priority-ordered chain of resolvers.
"""

from __future__ import annotations

import itertools
from typing import Iterator, List, Optional, Tuple, Type, TypeVar

from .base import Resolver

_R = TypeVar("_R", bound=Resolver)


class AggregateResolver(Resolver):
    """
    Consults attached resolvers from highest to lowest priority.

    Resolvers with equal priority are consulted in attach order. The first
    non-None result wins.
    """

    def __init__(self):
        self._queue: List[Tuple[int, int, Resolver]] = []
        self._counter = itertools.count()

    def attach(self, resolver: Resolver, priority: int = 1) -> AggregateResolver:
        if not isinstance(resolver, Resolver):
            raise TypeError(f"Expected a Resolver, got {type(resolver).__name__}")
        self._queue.append((priority, next(self._counter), resolver))
        self._queue.sort(key=lambda item: (-item[0], item[1]))
        return self

    def resolve(self, name: str) -> Optional[str]:
        for resolver in self:
            result = resolver.resolve(name)
            if result is not None:
                return result
        return None

    def has_type(self, cls: Type[Resolver]) -> bool:
        return any(isinstance(r, cls) for r in self)

    def fetch_by_type(self, cls: Type[_R]) -> Optional[_R]:
        for resolver in self:
            if isinstance(resolver, cls):
                return resolver
        return None

    def __iter__(self) -> Iterator[Resolver]:
        return iter([resolver for _, _, resolver in self._queue])

    def __len__(self) -> int:
        return len(self._queue)


__all__ = ["AggregateResolver"]
