"""Inline TeX markup to HTML.

The parser performs a single left-to-right scan over a run of text that has no
block structure. Plain characters accumulate in a buffer which is flushed
(typography first, then HTML escaping) every time a non-plain segment is
recognised: math spans, line breaks, TeX double quotes and commands.

Math payloads are preserved byte for byte (only HTML-escaped) so that a client
side engine such as MathJax can typeset them later. Unknown commands are
emitted as escaped literal text.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from .sanitizer import SAFE_REL, sanitize_url
from .scanner import parse_braced_ws
from .utils import MAX_NESTING_DEPTH, escape_html


STYLE_TAGS: dict[str, str] = {
    "bf": "strong",
    "textbf": "strong",
    "it": "em",
    "textit": "em",
    "t": "code",
    "tt": "code",
    "texttt": "code",
    "emph": "u",
    "underline": "u",
    "sout": "s",
    "textsc": "span",
}

SIZE_COMMANDS: frozenset[str] = frozenset(
    {
        "tiny",
        "scriptsize",
        "small",
        "normalsize",
        "large",
        "Large",
        "LARGE",
        "huge",
        "Huge",
    }
)

_GUILLEMETS_PATTERN = re.compile(r"<<(.*?)>>", re.DOTALL)
_SINGLE_QUOTE_PATTERN = re.compile(r"`(.)'")
_EM_DASH_PATTERN = re.compile(r'[~"]---')

_ESCAPED_DOUBLE_QUOTE = escape_html('"')


@dataclass(frozen=True, slots=True)
class InlineCommandResult:
    """Rendered HTML for a command and the offset just past what it consumed."""

    html: str
    end: int


def apply_typography(value: str) -> str:
    """Apply TeX typographic replacements to a plain-text run."""
    value = _GUILLEMETS_PATTERN.sub("«\\1»", value)
    value = _SINGLE_QUOTE_PATTERN.sub("'\\1'", value)
    return _EM_DASH_PATTERN.sub(" — ", value)


def find_unescaped(text: str, marker: str, start: int) -> int:
    """Return the index of ``marker`` at or after ``start``, skipping escapes."""
    index = start
    limit = len(text) - len(marker)
    while index <= limit:
        if text[index] == "\\":
            index += 2
            continue
        if text.startswith(marker, index):
            return index
        index += 1
    return -1


def find_inline_math_end(text: str, start: int) -> int:
    """Return the closing ``$`` of inline math, ignoring ``$$`` and escapes."""
    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "$" and not text.startswith("$", index + 1):
            return index
        index += 1
    return -1


def _anchor(href: str, caption_html: str) -> str:
    return (
        f'<a href="{escape_html(href)}" target="_blank" rel="{SAFE_REL}">'
        f"{caption_html}</a>"
    )


def _raw_command(name: str, end: int) -> InlineCommandResult:
    return InlineCommandResult(html=escape_html(f"\\{name}"), end=end)


def parse_inline_command(text: str, start: int, depth: int = 0) -> InlineCommandResult | None:
    """Render the command whose backslash sits at ``start``.

    Returns ``None`` when no ASCII letters follow the backslash. Commands that
    are unknown, that miss a required argument, or that would nest deeper than
    :data:`MAX_NESTING_DEPTH`, render as their escaped name and consume only
    the name.
    """
    cursor = start + 1
    while cursor < len(text) and text[cursor].isascii() and text[cursor].isalpha():
        cursor += 1
    if cursor == start + 1:
        return None

    name = text[start + 1 : cursor]
    nested = name in STYLE_TAGS or name in SIZE_COMMANDS or name == "href"
    if nested and depth >= MAX_NESTING_DEPTH:
        return _raw_command(name, cursor)

    if name in STYLE_TAGS or name in SIZE_COMMANDS:
        argument = parse_braced_ws(text, cursor)
        if argument is None:
            return _raw_command(name, cursor)
        tag = STYLE_TAGS.get(name, "span")
        inner = parse_inline(argument.content, depth + 1)
        return InlineCommandResult(html=f"<{tag}>{inner}</{tag}>", end=argument.end)

    if name == "url":
        argument = parse_braced_ws(text, cursor)
        if argument is None:
            return _raw_command(name, cursor)
        target = argument.content.strip()
        return InlineCommandResult(
            html=_anchor(sanitize_url(target), escape_html(target)),
            end=argument.end,
        )

    if name == "href":
        target = parse_braced_ws(text, cursor)
        if target is None:
            return _raw_command(name, cursor)
        caption = parse_braced_ws(text, target.end)
        if caption is None:
            return _raw_command(name, target.end)
        caption_html = parse_inline(caption.content, depth + 1)
        return InlineCommandResult(
            html=_anchor(sanitize_url(target.content.strip()), caption_html),
            end=caption.end,
        )

    return _raw_command(name, cursor)


def parse_inline(text: str, depth: int = 0) -> str:
    """Convert an inline TeX run into (unsanitized) HTML.

    ``depth`` counts the commands enclosing ``text``.
    """
    output: list[str] = []
    plain: list[str] = []

    def flush_plain() -> None:
        if plain:
            output.append(escape_html(apply_typography("".join(plain))))
            plain.clear()

    index = 0
    length = len(text)
    while index < length:
        char = text[index]

        if text.startswith("$$", index):
            end = find_unescaped(text, "$$", index + 2)
            if end != -1:
                flush_plain()
                output.append(escape_html(text[index : end + 2]))
                index = end + 2
                continue

        if char == "$":
            end = find_inline_math_end(text, index + 1)
            if end != -1:
                flush_plain()
                output.append(escape_html(text[index : end + 1]))
                index = end + 1
                continue

        if text.startswith("\\\\", index):
            flush_plain()
            output.append("<br/>")
            index += 2
            continue

        if text.startswith("``", index) or text.startswith("''", index):
            flush_plain()
            output.append(_ESCAPED_DOUBLE_QUOTE)
            index += 2
            continue

        if char == "\\":
            command = parse_inline_command(text, index, depth)
            if command is not None:
                flush_plain()
                output.append(command.html)
                index = command.end
                continue

        plain.append(char)
        index += 1

    flush_plain()
    return "".join(output)


__all__ = [
    "SIZE_COMMANDS",
    "STYLE_TAGS",
    "InlineCommandResult",
    "apply_typography",
    "find_inline_math_end",
    "find_unescaped",
    "parse_inline",
    "parse_inline_command",
]
