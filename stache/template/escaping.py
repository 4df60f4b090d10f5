"""
Default escaping for {{variable}} output.
"""

from __future__ import annotations

import html
from typing import Any, Callable

Escaper = Callable[[Any], str]


def html_escape(value: Any) -> str:
    """
    HTML-entity-encode the string form of a value.

    Escapes ``& < > "`` and leaves single quotes alone.
    """
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="replace")
    else:
        text = str(value)
    return html.escape(text, quote=False).replace('"', "&quot;")


def no_escape(value: Any) -> str:
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)


__all__ = ["Escaper", "html_escape", "no_escape"]
