"""Configuration models for rendering and math typesetting.

RenderOptions

`typeset` (`bool`)
: Schedule a MathJax typeset pass after rendering. The returned HTML is the
  same either way. Defaults to `False`, which keeps `render` free of side
  effects.

`typeset_target` (`Any`)
: One handle or a sequence of handles limiting where the engine re-typesets.
  Falsy entries are ignored; when nothing remains the whole document is
  typeset. Also accepted under the `typesetTarget` alias. Ignored unless
  `typeset` is set.

TypesetConfig

`script_url` (`str`)
: Location of the MathJax bundle injected when the host has none loaded.

`script_integrity` (`str`)
: Subresource integrity hash for the injected script. Empty disables it.

`load_timeout` (`float`)
: Seconds to wait for the engine before giving up. Must be positive.

`engine_config` (`dict[str, Any]`)
: Configuration stored in the host engine slot before the script loads.

`script_selectors` (`tuple[str, ...]`)
: CSS selectors used to detect a MathJax script that is already present.
"""

from __future__ import annotations

from collections.abc import Set
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/mathjax@3.2.2/es5/tex-mml-chtml.js"
DEFAULT_LOAD_TIMEOUT = 8.0
SCRIPT_MARKER = "tex-renderer"


def default_engine_config() -> dict[str, Any]:
    """Return the MathJax configuration matching the renderer's math delimiters."""
    return {
        "tex": {
            "inlineMath": [["$", "$"]],
            "displayMath": [["$$", "$$"]],
            "processEscapes": True,
        },
        "svg": {"fontCache": "global"},
    }


class RenderOptions(BaseModel):
    """Options accepted by :func:`texstatement.render`."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    typeset: bool = False
    typeset_target: Any = Field(default=None, alias="typesetTarget")

    def targets(self) -> tuple[Any, ...] | None:
        """Return the usable typeset targets, or ``None`` for the whole document."""
        target = self.typeset_target
        if not target:
            return None
        if isinstance(target, (list, tuple, Set)):
            candidates = list(target)
        else:
            candidates = [target]
        kept = tuple(candidate for candidate in candidates if candidate)
        return kept or None


class TypesetConfig(BaseModel):
    """Settings controlling how the MathJax engine is located and loaded."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    script_url: str = DEFAULT_SCRIPT_URL
    script_integrity: str = ""
    load_timeout: float = Field(default=DEFAULT_LOAD_TIMEOUT, gt=0)
    engine_config: dict[str, Any] = Field(default_factory=default_engine_config)
    script_selectors: tuple[str, ...] = (
        f'script[data-mathjax="{SCRIPT_MARKER}"]',
        "script#MathJax-script",
        'script[src*="mathjax"][src*="tex-mml-chtml"]',
        'script[src*="MathJax.js"]',
    )


__all__ = [
    "DEFAULT_LOAD_TIMEOUT",
    "DEFAULT_SCRIPT_URL",
    "SCRIPT_MARKER",
    "RenderOptions",
    "TypesetConfig",
    "default_engine_config",
]
