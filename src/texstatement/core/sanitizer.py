"""Allowlist sanitizer applied to every assembled HTML fragment.

The sanitizer is the security boundary of the package. It does not build a
DOM: it rewrites each tag occurrence independently and never checks that tags
are balanced.

Policy

`Tags`
: Only names listed in :data:`ALLOWED_TAGS` survive. Unknown tags, opening or
  closing, are removed together with their attribute text.

`Attributes`
: Each tag maps attribute names to an :class:`AttributeRule`. Attributes
  without an entry are stripped. Adding an allowlisted attribute is a data
  change in :data:`ALLOWED_ATTRIBUTES`.

`URLs`
: ``href`` values go through :func:`sanitize_url` again, even when the markup
  was produced by the inline parser.

`rel`
: Never taken from the input. Anchors that keep ``target="_blank"`` receive a
  fixed ``rel="noopener noreferrer"``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum, auto
from html import unescape
import re
from types import MappingProxyType

from .utils import escape_html


class AttributeRule(Enum):
    """Validation applied to an allowlisted attribute value."""

    URL = auto()
    """Value must pass :func:`sanitize_url`."""

    EQUALS_BLANK = auto()
    """Value is kept only when it is exactly ``_blank``."""

    POSITIVE_INT = auto()
    """Value must start with a positive decimal integer; it is re-serialised."""

    MANAGED = auto()
    """Value always comes from the sanitizer itself, never from the input."""


ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        "a",
        "blockquote",
        "br",
        "code",
        "div",
        "em",
        "footer",
        "li",
        "ol",
        "p",
        "pre",
        "s",
        "span",
        "strong",
        "table",
        "tbody",
        "td",
        "tr",
        "u",
        "ul",
    }
)

ALLOWED_ATTRIBUTES: Mapping[str, Mapping[str, AttributeRule]] = MappingProxyType(
    {
        "a": MappingProxyType(
            {
                "href": AttributeRule.URL,
                "target": AttributeRule.EQUALS_BLANK,
                "rel": AttributeRule.MANAGED,
            }
        ),
        "td": MappingProxyType(
            {
                "colspan": AttributeRule.POSITIVE_INT,
                "rowspan": AttributeRule.POSITIVE_INT,
            }
        ),
    }
)

SAFE_REL = "noopener noreferrer"

_NO_ATTRIBUTES: Mapping[str, AttributeRule] = MappingProxyType({})

# Quoted attribute values may contain ">". A tag with an unclosed quote ends at
# its first ">".
_ANY_TAG_PATTERN = re.compile(r"""<(?:[^>"']|"[^"]*"|'[^']*')*>|<[^>]*>""")
_TAG_PATTERN = re.compile(r"^<\s*(/?)\s*([a-zA-Z0-9]+)(.*)>$", re.DOTALL)
_ATTRIBUTE_PATTERN = re.compile(
    r"""([a-zA-Z_:][\w:.-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?"""
)
_SAFE_PROTOCOL_PATTERN = re.compile(r"^(?:https?://|mailto:|#)", re.IGNORECASE)
_SAFE_PATH_PATTERN = re.compile(r"^/(?!/)")
_LEADING_INT_PATTERN = re.compile(r"^\s*[+]?0*([0-9]+)")
_MAX_SPAN_DIGITS = 5


def sanitize_url(url: str | None) -> str:
    """Return ``url`` trimmed when its protocol is allowlisted, else ``""``.

    Accepted forms are ``http://``, ``https://``, ``mailto:`` and ``#`` anchors
    (scheme compared case-insensitively) plus absolute paths starting with a
    single ``/``. Protocol-relative ``//host`` URLs are rejected.
    """
    trimmed = str(url or "").strip()
    if not trimmed:
        return ""
    if _SAFE_PROTOCOL_PATTERN.match(trimmed) or _SAFE_PATH_PATTERN.match(trimmed):
        return trimmed
    return ""


def _validate_url(value: str) -> str | None:
    return sanitize_url(value) or None


def _validate_blank_target(value: str) -> str | None:
    return value if value == "_blank" else None


def _validate_positive_int(value: str) -> str | None:
    match = _LEADING_INT_PATTERN.match(value)
    if match is None:
        return None
    digits = match.group(1)
    if len(digits) > _MAX_SPAN_DIGITS:
        return None
    number = int(digits)
    return str(number) if number > 0 else None


def _discard(value: str) -> str | None:
    return None


_VALIDATORS: Mapping[AttributeRule, Callable[[str], str | None]] = MappingProxyType(
    {
        AttributeRule.URL: _validate_url,
        AttributeRule.EQUALS_BLANK: _validate_blank_target,
        AttributeRule.POSITIVE_INT: _validate_positive_int,
        AttributeRule.MANAGED: _discard,
    }
)


def parse_attributes(attribute_text: str) -> list[tuple[str, str]]:
    """Return ``(name, value)`` pairs with lowercased names and decoded values."""
    attributes: list[tuple[str, str]] = []
    for match in _ATTRIBUTE_PATTERN.finditer(attribute_text):
        name = match.group(1).lower()
        raw_value = next(
            (group for group in match.group(2, 3, 4) if group is not None),
            "",
        )
        attributes.append((name, unescape(raw_value)))
    return attributes


def sanitize_tag(raw_tag: str) -> str:
    """Return the allowlisted form of a single tag, or ``""`` to drop it."""
    match = _TAG_PATTERN.match(raw_tag)
    if match is None:
        return ""

    is_closing = match.group(1) == "/"
    tag = match.group(2).lower()
    if tag not in ALLOWED_TAGS:
        return ""
    if is_closing:
        return f"</{tag}>"
    if tag == "br":
        return "<br/>"

    rules = ALLOWED_ATTRIBUTES.get(tag, _NO_ATTRIBUTES)
    kept: list[tuple[str, str]] = []
    for name, value in parse_attributes(match.group(3) or ""):
        rule = rules.get(name)
        if rule is None:
            continue
        cleaned = _VALIDATORS[rule](value)
        if cleaned is not None:
            kept.append((name, cleaned))

    if tag == "a" and ("target", "_blank") in kept:
        kept.append(("rel", SAFE_REL))

    attributes = "".join(f' {name}="{escape_html(value)}"' for name, value in kept)
    return f"<{tag}{attributes}>"


def sanitize_html(html: str) -> str:
    """Rewrite every tag in ``html`` so that only allowlisted markup remains."""
    return _ANY_TAG_PATTERN.sub(lambda match: sanitize_tag(match.group(0)), html)


__all__ = [
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_TAGS",
    "SAFE_REL",
    "AttributeRule",
    "parse_attributes",
    "sanitize_html",
    "sanitize_tag",
    "sanitize_url",
]
