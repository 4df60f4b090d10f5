"""
Filesystem resolver over a stack of template directories.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from .base import Resolver

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = "mustache"
DEFAULT_SEPARATOR = "/"


class DefaultResolver(Resolver):
    """
    Looks templates up as files under a stack of directories.

    The most recently added directory is searched first. Template names use
    ``separator`` between path segments ("mail/welcome" → mail/welcome.mustache).
    """

    def __init__(self, suffix: str = DEFAULT_SUFFIX, separator: str = DEFAULT_SEPARATOR):
        self._paths: List[Path] = []
        self.suffix = suffix
        self.separator = separator

    @property
    def suffix(self) -> str:
        return self._suffix

    @suffix.setter
    def suffix(self, value: str) -> None:
        self._suffix = value.lstrip(".")

    def add_template_path(self, path: Union[str, Path]) -> DefaultResolver:
        p = Path(path)
        if not p.is_dir():
            raise ValueError(f"Template path does not exist or is not a directory: {p}")
        self._paths.insert(0, p.resolve())
        return self

    def get_template_paths(self) -> List[Path]:
        return list(self._paths)

    def resolve(self, name: str) -> Optional[str]:
        rel = name.replace(self.separator, os.sep) if self.separator else name
        if self._suffix:
            rel = f"{rel}.{self._suffix}"

        for base in self._paths:
            candidate = (base / rel).resolve()
            # Names must not escape the template directory
            if not candidate.is_relative_to(base):
                logger.debug(f"Template name '{name}' escapes {base}; skipped")
                continue
            if candidate.is_file():
                logger.debug(f"Resolved template '{name}' -> {candidate}")
                return candidate.read_text(encoding="utf-8")
        return None


__all__ = ["DefaultResolver", "DEFAULT_SUFFIX", "DEFAULT_SEPARATOR"]
