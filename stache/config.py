"""
Configuration loading.

Reads ``stache.yaml``:

    template_paths: [templates, shared/templates]
    suffix: mustache
    separator: /
    escape: html        # or "none"
    max_depth: 64       # optional recursion guard
    pragmas: [IMPLICIT-ITERATOR]
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigLoadError
from .resolver.default import DEFAULT_SEPARATOR, DEFAULT_SUFFIX
from .template.escaping import html_escape, no_escape

if TYPE_CHECKING:
    from .manager import Stache

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "stache.yaml"

_yaml = YAML(typ="safe")


class StacheConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    template_paths: List[Path] = Field(default_factory=list)
    suffix: str = DEFAULT_SUFFIX
    separator: str = DEFAULT_SEPARATOR
    escape: Literal["html", "none"] = "html"
    max_depth: Optional[int] = Field(default=None, ge=1)
    pragmas: List[str] = Field(default_factory=list)

    @field_validator("separator")
    @classmethod
    def _separator_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("separator must not be empty")
        return value


def find_config(start: Path) -> Optional[Path]:
    """Returns ``start/stache.yaml`` when present."""
    candidate = start / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(path: Path) -> StacheConfig:
    """
    Load and validate a configuration file.

    Relative template paths are resolved against the file's directory.

    Raises:
        ConfigLoadError: On unreadable YAML, a non-mapping document or invalid values
    """
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as e:
        raise ConfigLoadError(f"Failed to read config {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"YAML must be a mapping: {path}")

    try:
        config = StacheConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid config {path}: {e}") from e

    base = path.parent
    config.template_paths = [p if p.is_absolute() else (base / p) for p in config.template_paths]
    logger.debug(f"Loaded config {path}: {config.model_dump(mode='json')}")
    return config


def apply_config(manager: Stache, config: StacheConfig) -> Stache:
    """
    Configure a manager: resolver paths, escaping, recursion guard, pragma check.

    Raises:
        ConfigLoadError: If the config requires pragmas the manager does not know
    """
    missing = [name for name in config.pragmas if not manager.pragmas.has(name)]
    if missing:
        raise ConfigLoadError(f"Unknown pragmas in config: {', '.join(missing)}")

    resolver = manager.default_resolver
    resolver.suffix = config.suffix
    resolver.separator = config.separator
    for path in config.template_paths:
        try:
            resolver.add_template_path(path)
        except ValueError as e:
            raise ConfigLoadError(str(e)) from e

    renderer = manager.renderer
    renderer.set_escaper(html_escape if config.escape == "html" else no_escape)
    renderer.max_depth = config.max_depth
    return manager


def setup_logging(verbose: bool = False) -> None:
    """Attach a single stderr handler to the package logger."""
    log = logging.getLogger("stache")
    debug = verbose or bool(os.environ.get("STACHE_DEBUG"))
    log.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        log.addHandler(h)


__all__ = [
    "CONFIG_FILENAME",
    "StacheConfig",
    "find_config",
    "load_config",
    "apply_config",
    "setup_logging",
]
