"""Core conversion pipeline: TeX markup in, sanitized HTML out."""

from __future__ import annotations

from .blocks import SUPPORTED_BLOCK_ENVS, parse_blocks
from .config import RenderOptions, TypesetConfig
from .exceptions import TexStatementError, TypesetEngineUnavailable, TypesetHostError
from .inline import parse_inline
from .renderer import render, render_html
from .sanitizer import ALLOWED_ATTRIBUTES, ALLOWED_TAGS, sanitize_html, sanitize_url


__all__ = [
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_TAGS",
    "SUPPORTED_BLOCK_ENVS",
    "RenderOptions",
    "TexStatementError",
    "TypesetConfig",
    "TypesetEngineUnavailable",
    "TypesetHostError",
    "parse_blocks",
    "parse_inline",
    "render",
    "render_html",
    "sanitize_html",
    "sanitize_url",
]
