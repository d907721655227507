"""Entry point converting TeX statements into sanitized HTML."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .blocks import parse_blocks
from .config import RenderOptions
from .sanitizer import sanitize_html


def _coerce_options(
    options: RenderOptions | Mapping[str, Any] | None, overrides: Mapping[str, Any]
) -> RenderOptions:
    if options is None:
        resolved = RenderOptions()
    elif isinstance(options, RenderOptions):
        resolved = options
    else:
        resolved = RenderOptions.model_validate(dict(options))
    if overrides:
        aliases = {
            field.alias: name
            for name, field in RenderOptions.model_fields.items()
            if field.alias
        }
        merged = {"typeset": resolved.typeset, "typeset_target": resolved.typeset_target}
        for key, value in overrides.items():
            merged[aliases.get(key, key)] = value
        resolved = RenderOptions.model_validate(merged)
    return resolved


def render_html(tex: str | None) -> str:
    """Convert ``tex`` into sanitized HTML without any typesetting side effect."""
    normalized = str(tex if tex is not None else "").replace("\r\n", "\n")
    return sanitize_html("".join(parse_blocks(normalized)))


def render(
    tex: str | None,
    options: RenderOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> str:
    """Convert TeX/LaTeX text into sanitized HTML.

    Math payloads (``$...$`` and ``$$...$$``) are kept intact so that MathJax
    can pick them up. When ``typeset`` is requested, a MathJax pass is
    scheduled on the process-wide typeset scheduler; the returned HTML does not
    depend on it. Malformed markup never raises; it degrades to escaped text.
    """
    resolved = _coerce_options(options, overrides)
    html = render_html(tex)

    if resolved.typeset:
        from texstatement.typeset.scheduler import schedule_typeset

        schedule_typeset(resolved.targets())

    return html


__all__ = ["render", "render_html"]
