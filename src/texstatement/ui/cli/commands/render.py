"""Implementation of the primary ``texstatement`` CLI command."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Annotated

import typer

from texstatement.core.renderer import render_html

from ..state import configure_logging, emit_error, emit_warning, render_message, set_cli_state


STDIN_MARKER = "-"


def _read_source(source: str) -> str:
    if source == STDIN_MARKER:
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def render(
    source: Annotated[
        str,
        typer.Argument(
            help="TeX file to convert. Use '-' to read from standard input.",
            show_default=False,
        ),
    ] = STDIN_MARKER,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the HTML to this file instead of standard output.",
            dir_okay=False,
            writable=True,
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full tracebacks when an unexpected error occurs."),
    ] = False,
) -> None:
    """Convert TeX markup into sanitized HTML."""
    state = set_cli_state(verbosity=verbose, debug=debug)
    configure_logging(state)

    try:
        tex = _read_source(source)
    except (OSError, UnicodeDecodeError) as exc:
        emit_error(f"Unable to read '{source}'.", exception=exc)
        raise typer.Exit(code=1) from exc

    html = render_html(tex)
    if not html:
        emit_warning("The input produced no HTML output.")

    if output is None:
        typer.echo(html)
        return

    try:
        output.write_text(html + "\n", encoding="utf-8")
    except OSError as exc:
        emit_error(f"Unable to write '{output}'.", exception=exc)
        raise typer.Exit(code=1) from exc
    if state.verbosity >= 1:
        render_message("info", f"Wrote {output}")


__all__ = ["render"]
