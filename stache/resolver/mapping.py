"""
In-memory resolver for named templates.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .base import Resolver


class MappingResolver(Resolver):
    """Resolves templates registered by name."""

    def __init__(self, templates: Optional[Mapping[str, str]] = None):
        self._templates: Dict[str, str] = dict(templates or {})

    def set_template(self, name: str, template: str) -> MappingResolver:
        self._templates[name] = template
        return self

    def has(self, name: str) -> bool:
        return name in self._templates

    def resolve(self, name: str) -> Optional[str]:
        return self._templates.get(name)


__all__ = ["MappingResolver"]
