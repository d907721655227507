"""Rendering of ``itemize`` and ``enumerate`` bodies."""

from __future__ import annotations

import re
from typing import Literal

from .inline import parse_inline
from .utils import fold_newlines


ListKind = Literal["itemize", "enumerate"]

_ITEM_PATTERN = re.compile(r"\\item\b", re.ASCII)
_ITEM_TOKEN_LENGTH = len("\\item")


def render_list(kind: ListKind, content: str) -> str:
    """Render a list environment body as ``<ul>`` or ``<ol>``.

    A body without any ``\\item`` renders as an empty string rather than an
    empty container.
    """
    starts = [match.start() for match in _ITEM_PATTERN.finditer(content)]
    if not starts:
        return ""

    items: list[str] = []
    for position, start in enumerate(starts):
        end = starts[position + 1] if position + 1 < len(starts) else len(content)
        body = content[start + _ITEM_TOKEN_LENGTH : end].strip()
        if not body:
            continue
        items.append(f"<li>{parse_inline(fold_newlines(body))}</li>")

    tag = "ol" if kind == "enumerate" else "ul"
    return f"<{tag}>{''.join(items)}</{tag}>"


__all__ = ["ListKind", "render_list"]
