"""Top-level block recognition.

The block parser scans for the next recognised block marker, renders the text
before it as paragraphs and dispatches on the marker:

``itemize`` / ``enumerate``
: rendered by :mod:`texstatement.core.lists`.

``tabular``
: an optional column spec group followed by rows, rendered by
  :mod:`texstatement.core.tables`.

``lstlisting``
: verbatim code in ``<pre><code>``.

``center``
: block-parsed recursively inside a ``<div>``.

``\\epigraph{quote}{author}``
: a ``<blockquote>`` with a ``<footer>``.

Malformed structures never raise. An environment without its matching close
turns the rest of the input into paragraph text; an incomplete epigraph emits
the scanned marker as text and scanning resumes right after it. A ``center``
nested deeper than :data:`~texstatement.core.utils.MAX_NESTING_DEPTH` is
rendered as paragraph text.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Literal, get_args

from .inline import parse_inline
from .lists import render_list
from .scanner import parse_braced, parse_braced_ws
from .tables import render_tabular
from .utils import MAX_NESTING_DEPTH, escape_html, fold_newlines


logger = logging.getLogger(__name__)

BlockEnvironment = Literal["itemize", "enumerate", "lstlisting", "center", "tabular"]

SUPPORTED_BLOCK_ENVS: tuple[str, ...] = get_args(BlockEnvironment)

_BLOCK_START_PATTERN = re.compile(
    r"\\begin\{(" + "|".join(SUPPORTED_BLOCK_ENVS) + r")\}|\\epigraph\{"
)
_PARAGRAPH_SEPARATOR = re.compile(r"\n\s*\n")
_EPIGRAPH = "\\epigraph"


@dataclass(frozen=True, slots=True)
class EnvironmentSpan:
    """Offsets of a matched ``\\begin{K}...\\end{K}`` region."""

    inner_start: int
    inner_end: int
    end: int


def find_environment(text: str, begin_index: int, name: str) -> EnvironmentSpan | None:
    """Locate the close matching the ``\\begin{name}`` found at ``begin_index``.

    Nested environments of the same kind are tracked by depth so that an inner
    ``\\end`` is never taken for the outer one.
    """
    begin_token = f"\\begin{{{name}}}"
    end_token = f"\\end{{{name}}}"

    depth = 1
    cursor = begin_index + len(begin_token)
    next_end = text.find(end_token, cursor)
    while next_end != -1:
        next_begin = text.find(begin_token, cursor, next_end)
        if next_begin != -1:
            depth += 1
            cursor = next_begin + len(begin_token)
            continue

        depth -= 1
        if depth == 0:
            return EnvironmentSpan(
                inner_start=begin_index + len(begin_token),
                inner_end=next_end,
                end=next_end + len(end_token),
            )
        cursor = next_end + len(end_token)
        next_end = text.find(end_token, cursor)
    return None


def render_paragraph(raw: str) -> str | None:
    """Render one paragraph segment, or ``None`` when it has no content."""
    trimmed = raw.strip()
    if not trimmed:
        return None
    inline = parse_inline(fold_newlines(trimmed))
    if not inline.strip():
        return None
    return f"<p>{inline}</p>"


def render_paragraph_chunk(chunk: str) -> list[str]:
    """Split ``chunk`` on blank lines and render each non-empty paragraph."""
    paragraphs = (render_paragraph(segment) for segment in _PARAGRAPH_SEPARATOR.split(chunk))
    return [paragraph for paragraph in paragraphs if paragraph is not None]


def _render_environment(text: str, name: str, span: EnvironmentSpan, depth: int) -> str:
    if name == "tabular":
        spec = ""
        content_start = span.inner_start
        spec_group = parse_braced(text, content_start)
        if spec_group is not None and spec_group.end <= span.inner_end:
            spec = spec_group.content
            content_start = spec_group.end
        return render_tabular(spec, text[content_start : span.inner_end])

    body = text[span.inner_start : span.inner_end]
    if name == "itemize" or name == "enumerate":
        return render_list(name, body)
    if name == "lstlisting":
        code = escape_html(body.strip("\n"))
        return f"<pre><code>{code}</code></pre>"
    return f"<div>{''.join(parse_blocks(body, depth + 1))}</div>"


def parse_blocks(text: str, depth: int = 0) -> list[str]:
    """Render ``text`` into a list of HTML block fragments in source order.

    ``depth`` counts the ``center`` environments enclosing ``text``.
    """
    html: list[str] = []
    last = 0

    while True:
        match = _BLOCK_START_PATTERN.search(text, last)
        if match is None:
            break

        if match.start() > last:
            html.extend(render_paragraph_chunk(text[last : match.start()]))

        name = match.group(1)
        if name is not None:
            span = find_environment(text, match.start(), name)
            if span is None:
                logger.debug("Unterminated '%s' environment at offset %d.", name, match.start())
                html.extend(render_paragraph_chunk(text[match.start() :]))
                return html
            if name == "center" and depth >= MAX_NESTING_DEPTH:
                logger.debug("Nesting limit reached at offset %d.", match.start())
                html.extend(render_paragraph_chunk(text[match.start() : span.end]))
            else:
                html.append(_render_environment(text, name, span, depth))
            last = span.end
            continue

        marker_end = match.start() + len(_EPIGRAPH)
        quote = parse_braced_ws(text, marker_end)
        if quote is None:
            logger.debug("Epigraph without quote argument at offset %d.", match.start())
            html.extend(render_paragraph_chunk(text[match.start() : marker_end]))
            last = marker_end
            continue

        author = parse_braced_ws(text, quote.end)
        if author is None:
            logger.debug("Epigraph without author argument at offset %d.", match.start())
            html.extend(render_paragraph_chunk(text[match.start() : quote.end]))
            last = quote.end
            continue

        html.append(
            f"<blockquote><p>{parse_inline(quote.content.strip())}</p>"
            f"<footer>{parse_inline(author.content.strip())}</footer></blockquote>"
        )
        last = author.end

    if last < len(text):
        html.extend(render_paragraph_chunk(text[last:]))
    return html


__all__ = [
    "SUPPORTED_BLOCK_ENVS",
    "BlockEnvironment",
    "EnvironmentSpan",
    "find_environment",
    "parse_blocks",
    "render_paragraph",
    "render_paragraph_chunk",
]
