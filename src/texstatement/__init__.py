"""Primary public API for texstatement."""

from __future__ import annotations

from texstatement.core.config import RenderOptions, TypesetConfig
from texstatement.core.exceptions import (
    TexStatementError,
    TypesetEngineUnavailable,
    TypesetHostError,
)
from texstatement.core.renderer import render, render_html
from texstatement.core.sanitizer import sanitize_html, sanitize_url
from texstatement.typeset import (
    ScriptSpec,
    TypesetHost,
    TypesetScheduler,
    get_typeset_scheduler,
    install_typeset_host,
    schedule_typeset,
)
from texstatement.version import get_version


__version__ = get_version()

__all__ = [
    "RenderOptions",
    "ScriptSpec",
    "TexStatementError",
    "TypesetConfig",
    "TypesetEngineUnavailable",
    "TypesetHost",
    "TypesetHostError",
    "TypesetScheduler",
    "__version__",
    "get_typeset_scheduler",
    "install_typeset_host",
    "render",
    "render_html",
    "sanitize_html",
    "sanitize_url",
    "schedule_typeset",
]
