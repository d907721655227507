"""Custom exception hierarchy for the TeX statement renderer.

Conversion itself never raises: malformed markup degrades to escaped text.
These exceptions describe failures of the optional typesetting machinery and
are caught at the scheduler boundary.
"""

from __future__ import annotations


class TexStatementError(RuntimeError):
    """Base exception for texstatement failures."""


class TypesetHostError(TexStatementError):
    """Raised when the installed host cannot provide a required capability."""


class TypesetEngineUnavailable(TexStatementError):
    """Raised when the external typesetting engine fails to load in time."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "TexStatementError",
    "TypesetEngineUnavailable",
    "TypesetHostError",
    "exception_hint",
    "exception_messages",
]
