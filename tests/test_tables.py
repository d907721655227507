from __future__ import annotations

from texstatement.core.tables import (
    TableCell,
    layout_tabular,
    parse_table_cell,
    render_tabular,
)


def test_render_simple_table() -> None:
    html = render_tabular("|c|c|", " A & B \\\\ C & D ")

    assert html == (
        '<table data-spec="|c|c|"><tbody>'
        "<tr><td>A</td><td>B</td></tr>"
        "<tr><td>C</td><td>D</td></tr>"
        "</tbody></table>"
    )


def test_render_table_without_spec() -> None:
    assert render_tabular("", "A") == "<table><tbody><tr><td>A</td></tr></tbody></table>"


def test_rules_and_empty_rows_are_dropped() -> None:
    html = render_tabular("", "\\hline A & B \\\\ \\hline \\cline{1-2}")

    assert html == "<table><tbody><tr><td>A</td><td>B</td></tr></tbody></table>"


def test_nested_wrappers_combine_spans() -> None:
    cell = parse_table_cell("\\multicolumn{2}{c}{\\multirow{2}{*}{X}}")

    assert cell == TableCell(html="X", colspan=2, rowspan=2)


def test_wrapper_order_does_not_matter() -> None:
    cell = parse_table_cell(" \\multirow{3}{*}{\\multicolumn{2}{|c|}{\\textbf{Y}}} ")

    assert cell == TableCell(html="<strong>Y</strong>", colspan=2, rowspan=3)


def test_repeated_wrappers_multiply() -> None:
    cell = parse_table_cell("\\multicolumn{2}{c}{\\multicolumn{3}{c}{Z}}")

    assert cell.colspan == 6
    assert cell.rowspan == 1


def test_malformed_wrapper_is_left_as_text() -> None:
    cell = parse_table_cell("\\multicolumn{x}{c}{A}")

    assert cell.colspan == 1
    assert cell.html.startswith("\\multicolumn")


def test_wrapper_followed_by_text_is_not_unwrapped() -> None:
    cell = parse_table_cell("\\multicolumn{2}{c}{A} tail")

    assert cell.colspan == 1


def test_span_attributes_are_rendered() -> None:
    html = render_tabular("", "\\multicolumn{2}{c}{\\multirow{2}{*}{X}} & Y")

    assert '<td colspan="2" rowspan="2">X</td><td>Y</td>' in html


def test_rowspan_reserves_column_in_following_row() -> None:
    rows = layout_tabular("\\multirow{2}{*}{A} & B \\\\ C \\\\ D")

    assert [[placed.column for placed in row] for row in rows] == [[0, 1], [1], [0]]


def test_block_span_reserves_every_covered_column() -> None:
    rows = layout_tabular("\\multicolumn{2}{c}{\\multirow{2}{*}{X}} & Y \\\\ Z")

    assert [placed.column for placed in rows[0]] == [0, 2]
    assert [placed.column for placed in rows[1]] == [2]


def test_line_break_inside_braces_stays_in_cell() -> None:
    rows = layout_tabular("\\textbf{a \\\\ b} & c")

    assert len(rows) == 1
    assert rows[0][0].cell.html == "<strong>a <br/> b</strong>"


def test_span_counts_are_capped() -> None:
    cell = parse_table_cell("\\multicolumn{20000000}{c}{\\multirow{99999999}{*}{X}}")

    assert cell.colspan == 1000
    assert cell.rowspan == 65534


def test_nested_spans_are_capped() -> None:
    cell = parse_table_cell("\\multicolumn{900}{c}{\\multicolumn{900}{c}{X}}")

    assert cell.colspan == 1000


def test_span_count_with_thousands_of_digits() -> None:
    cell = parse_table_cell("\\multicolumn{" + "9" * 5000 + "}{c}{X}")

    assert cell == TableCell(html="X", colspan=1000, rowspan=1)


def test_non_ascii_digits_are_not_a_count() -> None:
    cell = parse_table_cell("\\multicolumn{²}{c}{X}")

    assert cell.colspan == 1
    assert cell.html.startswith("\\multicolumn")


def test_wide_reservation_is_skipped_as_a_block() -> None:
    rows = layout_tabular(
        "\\multicolumn{1000}{c}{\\multirow{3}{*}{X}} & Y \\\\ Z \\\\ W \\\\ V"
    )

    assert [[placed.column for placed in row] for row in rows] == [[0, 1000], [1000], [1000], [0]]
