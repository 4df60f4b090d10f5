from __future__ import annotations

import json
from typing import Any


def dumps(obj: Any, *, indent: int | None = None) -> str:
    """
    Minimal JSON dumper for CLI output.
    ensure_ascii=False; the trailing newline is left to the CLI.
    """
    return json.dumps(obj, ensure_ascii=False, indent=indent)

__all__ = ["dumps"]
