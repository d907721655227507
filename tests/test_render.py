from __future__ import annotations

from collections.abc import Iterator
from html import unescape
from typing import Any

from bs4 import BeautifulSoup
from pydantic import ValidationError
import pytest

import texstatement
from texstatement import RenderOptions, install_typeset_host, render
from texstatement.core.sanitizer import ALLOWED_ATTRIBUTES, ALLOWED_TAGS
import texstatement.typeset.scheduler as scheduler_module


@pytest.fixture(autouse=True)
def _reset_default_scheduler() -> Iterator[None]:
    install_typeset_host(None)
    yield
    install_typeset_host(None)


@pytest.fixture
def scheduled(monkeypatch: pytest.MonkeyPatch) -> list[Any]:
    calls: list[Any] = []

    def fake_schedule(targets: Any = None) -> bool:
        calls.append(targets)
        return True

    monkeypatch.setattr(scheduler_module, "schedule_typeset", fake_schedule)
    return calls


def test_paragraphs() -> None:
    html = render("First paragraph.\n\nSecond paragraph.")

    assert html == "<p>First paragraph.</p><p>Second paragraph.</p>"


def test_text_styles() -> None:
    html = render("\\textbf{Bold} \\textit{Italic} \\underline{U}")

    assert html == "<p><strong>Bold</strong> <em>Italic</em> <u>U</u></p>"


def test_itemize() -> None:
    html = render("\\begin{itemize}\n\\item One\n\\item Two\n\\end{itemize}")

    assert html == "<ul><li>One</li><li>Two</li></ul>"


def test_tabular_drops_spec_attribute() -> None:
    html = render("\\begin{tabular}{|c|c|}\nA & B \\\\\nC & D\n\\end{tabular}")

    assert html == (
        "<table><tbody><tr><td>A</td><td>B</td></tr>"
        "<tr><td>C</td><td>D</td></tr></tbody></table>"
    )


def test_tabular_spans_survive_sanitizing() -> None:
    html = render(
        "\\begin{tabular}{cc}\\multicolumn{2}{c}{\\multirow{2}{*}{X}} & Y \\\\ Z\\end{tabular}"
    )

    assert '<td colspan="2" rowspan="2">X</td>' in html


def test_unsafe_href_is_removed() -> None:
    html = render("\\href{javascript:alert(1)}{Click}")

    assert html == '<p><a target="_blank" rel="noopener noreferrer">Click</a></p>'


def test_protocol_relative_href_is_removed() -> None:
    html = render("\\href{//evil.example}{bad}")

    assert html == '<p><a target="_blank" rel="noopener noreferrer">bad</a></p>'


def test_safe_link_is_kept() -> None:
    html = render("See \\url{https://example.com}.")

    assert html == (
        '<p>See <a href="https://example.com" target="_blank" rel="noopener noreferrer">'
        "https://example.com</a>.</p>"
    )


def test_math_is_kept_for_mathjax() -> None:
    html = render("Inline $a+b$ and display $$x^2$$")

    assert html == "<p>Inline $a+b$ and display $$x^2$$</p>"


def test_math_payload_round_trips_through_escaping() -> None:
    html = render("$a<b>&c$")

    assert html == "<p>$a&lt;b&gt;&amp;c$</p>"
    assert unescape(html[3:-4]) == "$a<b>&c$"


def test_windows_line_endings() -> None:
    assert render("A\r\n\r\nB") == "<p>A</p><p>B</p>"


def test_none_and_empty_input() -> None:
    assert render(None) == ""
    assert render("") == ""


@pytest.mark.parametrize(
    "tex",
    [
        "<script>alert(1)</script>",
        "\\href{javascript:alert(1)}{x}",
        "\\url{javascript:alert(1)}",
        "<img src=x onerror=alert(1)>",
        '<a href="javascript:alert(1)">x</a>',
        "\\begin{itemize",
        "{{{{",
        "}}}}",
        "$$$",
        "\\",
        "\\\\",
        "\\epigraph",
        "\\multicolumn{2}",
        "\\begin{tabular}{|c|",
        "\\begin{tabular}{c}\\multirow{0}{*}{A}\\end{tabular}",
        "<<>>",
        "&<>\"'",
        "\r\n\r\n",
    ],
)
def test_hostile_input_yields_allowlisted_markup(tex: str) -> None:
    html = render(tex)
    soup = BeautifulSoup(html, "html.parser")

    for element in soup.find_all(True):
        assert element.name in ALLOWED_TAGS
        allowed = ALLOWED_ATTRIBUTES.get(element.name, {})
        assert set(element.attrs) <= set(allowed)
        href = element.get("href")
        if href is not None:
            assert not href.strip().lower().startswith("javascript:")
    assert "<script" not in html.lower()


def test_render_is_exported_at_package_level() -> None:
    assert texstatement.render is render
    assert texstatement.render_html("x") == "<p>x</p>"


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ValidationError):
        render("x", {"bogus": True})


def test_typeset_is_off_by_default(scheduled: list[Any]) -> None:
    render("$x$")

    assert scheduled == []


def test_typeset_schedules_whole_document(scheduled: list[Any]) -> None:
    html = render("$x$", typeset=True)

    assert html == "<p>$x$</p>"
    assert scheduled == [None]


def test_typeset_targets_drop_falsy_entries(scheduled: list[Any]) -> None:
    element = object()

    render("$x$", {"typeset": True, "typesetTarget": [None, element, 0]})
    render("$x$", RenderOptions(typeset=True, typeset_target=[None]))

    assert scheduled == [(element,), None]


def test_typeset_without_host_is_harmless() -> None:
    assert render("$x$", typeset=True) == "<p>$x$</p>"


@pytest.mark.parametrize(
    "tex",
    [
        "\\textbf{" * 1000 + "x" + "}" * 1000,
        "\\href{#a}{" * 1000 + "x" + "}" * 1000,
        "\\begin{center}" * 1000 + "x" + "\\end{center}" * 1000,
        "\\begin{center}" * 1000 + "x",
    ],
)
def test_deep_nesting_does_not_raise(tex: str) -> None:
    html = render(tex)

    assert html.startswith(("<p>", "<div>"))


def test_huge_table_span_is_capped() -> None:
    html = render(
        "\\begin{tabular}{c}\\multirow{2}{*}{\\multicolumn{20000000}{c}{x}} \\\\ y\\end{tabular}"
    )

    assert html == (
        '<table><tbody><tr><td colspan="1000" rowspan="2">x</td></tr>'
        "<tr><td>y</td></tr></tbody></table>"
    )
