"""Rendering of ``tabular`` environments.

Rows are split on ``\\\\`` and cells on ``&``, both only at brace depth zero.
Cells may be wrapped, in any order and to any depth, by ``\\multicolumn`` and
``\\multirow``; spans multiply when wrappers nest.

Column placement uses a row-span ledger: the column ranges still covered by a
rowspan declared above, each with the number of physical rows it still
reserves. The cursor skips those ranges before placing a new cell. Spans are
capped at the HTML limits of 1000 columns and 65534 rows.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
import re

from .inline import parse_inline
from .scanner import BracedGroup, parse_braced_ws, split_top_level
from .utils import escape_html


_HLINE_PATTERN = re.compile(r"\\hline")
_CLINE_PATTERN = re.compile(r"\\cline\{[^}]*\}")
_WRAPPERS = ("\\multicolumn", "\\multirow")
_SPAN_LIMITS = {"\\multicolumn": 1000, "\\multirow": 65534}


@dataclass(frozen=True, slots=True)
class TableCell:
    """A tabular cell after span extraction."""

    html: str
    colspan: int = 1
    rowspan: int = 1


@dataclass(frozen=True, slots=True)
class PlacedCell:
    """A cell together with the first column it occupies."""

    column: int
    cell: TableCell


def _read_wrapper(text: str, name: str) -> tuple[int, str] | None:
    """Return ``(count, inner)`` when ``text`` is exactly ``name{N}{spec}{inner}``."""
    if not text.startswith(name):
        return None
    cursor = len(name)
    if cursor < len(text) and text[cursor].isalpha():
        return None

    groups: list[BracedGroup] = []
    for _ in range(3):
        group = parse_braced_ws(text, cursor)
        if group is None:
            return None
        groups.append(group)
        cursor = group.end

    count_text = groups[0].content.strip()
    if cursor != len(text) or not count_text.isascii() or not count_text.isdigit():
        return None
    limit = _SPAN_LIMITS[name]
    digits = count_text.lstrip("0")
    count = limit if len(digits) > len(str(limit)) else min(int(digits or "0"), limit)
    return max(count, 1), groups[2].content


def parse_table_cell(raw_cell: str) -> TableCell:
    """Peel span wrappers off ``raw_cell`` and render the residual text."""
    text = raw_cell.strip()
    colspan = 1
    rowspan = 1

    changed = True
    while changed:
        changed = False
        for name in _WRAPPERS:
            wrapper = _read_wrapper(text, name)
            if wrapper is None:
                continue
            count, text = wrapper
            text = text.strip()
            if name == "\\multicolumn":
                colspan = min(colspan * count, _SPAN_LIMITS[name])
            else:
                rowspan = min(rowspan * count, _SPAN_LIMITS[name])
            changed = True

    return TableCell(html=parse_inline(text), colspan=colspan, rowspan=rowspan)


# (first column, end column, rows remaining), kept sorted by first column.
Reservation = tuple[int, int, int]


def _advance_ledger(ledger: list[Reservation]) -> None:
    ledger[:] = [(first, end, remaining - 1) for first, end, remaining in ledger if remaining > 1]


def _next_free_column(ledger: list[Reservation], column: int) -> int:
    for first, end, _ in ledger:
        if first > column:
            break
        if column < end:
            column = end
    return column


def layout_tabular(content: str) -> list[list[PlacedCell]]:
    """Split tabular content into rows of cells positioned on the column grid."""
    rows: list[list[PlacedCell]] = []
    ledger: list[Reservation] = []
    first_row = True

    for raw_row in split_top_level(content, "\\\\"):
        row = _CLINE_PATTERN.sub("", _HLINE_PATTERN.sub("", raw_row)).strip()
        if not row:
            continue

        if not first_row:
            _advance_ledger(ledger)
        first_row = False

        placed: list[PlacedCell] = []
        column = 0
        for raw_cell in split_top_level(row, "&"):
            cell = parse_table_cell(raw_cell)
            column = _next_free_column(ledger, column)
            if cell.rowspan > 1:
                bisect.insort(ledger, (column, column + cell.colspan, cell.rowspan))
            placed.append(PlacedCell(column=column, cell=cell))
            column += cell.colspan
        rows.append(placed)

    return rows


def _render_cell(cell: TableCell) -> str:
    attributes = ""
    if cell.colspan > 1:
        attributes += f' colspan="{cell.colspan}"'
    if cell.rowspan > 1:
        attributes += f' rowspan="{cell.rowspan}"'
    return f"<td{attributes}>{cell.html}</td>"


def render_tabular(spec: str, content: str) -> str:
    """Render a tabular body as an HTML table.

    ``spec`` is the column specification (``|c|c|``); it carries no layout
    meaning here and is only attached as a descriptive ``data-spec`` attribute.
    """
    body = "".join(
        f"<tr>{''.join(_render_cell(placed.cell) for placed in row)}</tr>"
        for row in layout_tabular(content)
    )
    spec_attribute = f' data-spec="{escape_html(spec)}"' if spec else ""
    return f"<table{spec_attribute}><tbody>{body}</tbody></table>"


__all__ = [
    "PlacedCell",
    "TableCell",
    "layout_tabular",
    "parse_table_cell",
    "render_tabular",
]
