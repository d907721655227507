"""Balanced brace scanning for TeX arguments.

Every helper works on an explicit integer cursor and returns either a small
immutable result or ``None``; no scan state survives between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ROW_SEPARATOR = "\\\\"
CELL_SEPARATOR = "&"


@dataclass(frozen=True, slots=True)
class BracedGroup:
    """A balanced ``{...}`` group located in a source string."""

    content: str
    start: int
    end: int
    content_start: int


def _is_escaped(text: str, index: int) -> bool:
    return index > 0 and text[index - 1] == "\\"


def parse_braced(text: str, start: int) -> BracedGroup | None:
    """Return the balanced group opening at ``start``.

    ``end`` points just past the matching ``}``. Braces preceded by a backslash
    are literal. ``None`` is returned when ``text[start]`` is not ``{`` or the
    group never closes.
    """
    if start >= len(text) or text[start] != "{":
        return None

    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{" and not _is_escaped(text, index):
            depth += 1
        elif char == "}" and not _is_escaped(text, index):
            depth -= 1
            if depth == 0:
                return BracedGroup(
                    content=text[start + 1 : index],
                    start=start,
                    end=index + 1,
                    content_start=start + 1,
                )
    return None


def parse_braced_ws(text: str, start: int) -> BracedGroup | None:
    """Like :func:`parse_braced` but skip whitespace before the opening brace."""
    cursor = start
    while cursor < len(text) and text[cursor].isspace():
        cursor += 1
    return parse_braced(text, cursor)


def split_top_level(text: str, delimiter: Literal["&", "\\\\"]) -> list[str]:
    """Split ``text`` on ``delimiter`` occurring at brace depth zero.

    Used for tabular rows (``\\\\``) and cells (``&``). A trailing fragment that
    holds only whitespace is dropped.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    index = 0
    length = len(text)

    while index < length:
        char = text[index]

        if char == "{" and not _is_escaped(text, index):
            depth += 1
        elif char == "}" and not _is_escaped(text, index) and depth > 0:
            depth -= 1

        if depth == 0:
            if delimiter == CELL_SEPARATOR and char == "&":
                parts.append("".join(current))
                current = []
                index += 1
                continue
            if delimiter == ROW_SEPARATOR and text.startswith(ROW_SEPARATOR, index):
                parts.append("".join(current))
                current = []
                index += 2
                continue

        current.append(char)
        index += 1

    tail = "".join(current)
    if tail.strip():
        parts.append(tail)
    return parts


__all__ = [
    "CELL_SEPARATOR",
    "ROW_SEPARATOR",
    "BracedGroup",
    "parse_braced",
    "parse_braced_ws",
    "split_top_level",
]
