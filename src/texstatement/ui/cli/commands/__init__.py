"""CLI command implementations exposed via `texstatement.ui.cli`."""

from __future__ import annotations

from .render import render


__all__ = ["render"]
