"""Optional MathJax typesetting triggered after rendering."""

from __future__ import annotations

from .host import ScriptHandle, ScriptSpec, TypesetEngine, TypesetHost
from .scheduler import (
    PendingScope,
    ScopeKind,
    TypesetScheduler,
    get_typeset_scheduler,
    install_typeset_host,
    schedule_typeset,
)


__all__ = [
    "PendingScope",
    "ScopeKind",
    "ScriptHandle",
    "ScriptSpec",
    "TypesetEngine",
    "TypesetHost",
    "TypesetScheduler",
    "get_typeset_scheduler",
    "install_typeset_host",
    "schedule_typeset",
]
