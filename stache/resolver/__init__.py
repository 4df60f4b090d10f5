"""
Template lookup strategies.
"""

from __future__ import annotations

from .aggregate import AggregateResolver
from .base import Resolver
from .default import DefaultResolver
from .mapping import MappingResolver

__all__ = ["Resolver", "AggregateResolver", "DefaultResolver", "MappingResolver"]
