"""Utility helpers shared by the TeX to HTML pipeline."""

from __future__ import annotations

from html import escape


MAX_NESTING_DEPTH = 64
"""Deepest command or environment nesting rendered as markup; deeper levels stay text."""


def escape_html(value: str) -> str:
    """Escape ``& < > " '`` so the value is safe in text and attribute context."""
    return escape(str(value), quote=True)


def fold_newlines(text: str) -> str:
    """Fold single newlines into spaces, following TeX soft-wrap semantics."""
    return text.replace("\n", " ")


__all__ = ["MAX_NESTING_DEPTH", "escape_html", "fold_newlines"]
