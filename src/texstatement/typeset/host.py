"""Capabilities the typeset scheduler expects from its environment.

The renderer never talks to a browser directly. A *host* wraps whatever
document-like environment is available (a Pyodide page, an embedded web view,
a test double) and exposes the few operations needed to load MathJax and ask
it to typeset.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TypesetEngine(Protocol):
    """Loaded MathJax-like engine.

    ``typeset_clear`` is optional; engines without it are still usable.
    """

    def typeset(self, elements: Sequence[Any] | None = None) -> Awaitable[Any]: ...


@runtime_checkable
class ScriptHandle(Protocol):
    """A script element present in the host document."""

    def wait_loaded(self) -> Awaitable[None]:
        """Resolve once the script has loaded; raise if loading failed."""
        ...


@dataclass(frozen=True, slots=True)
class ScriptSpec:
    """Description of the script element to inject into the host."""

    src: str
    id: str = "MathJax-script"
    async_: bool = True
    crossorigin: str = "anonymous"
    integrity: str = ""
    data: Mapping[str, str] = field(default_factory=dict)


@runtime_checkable
class TypesetHost(Protocol):
    """Document/window-like environment able to load and hold the engine.

    ``engine`` is the global slot MathJax reads its configuration from and
    replaces with itself once loaded. Hosts may also define
    ``request_frame(callback)`` to run ``callback`` on the next animation
    frame; without it the scheduler defers to the next event loop iteration.
    """

    engine: Any

    def find_script(self, selectors: Sequence[str]) -> ScriptHandle | None: ...

    def inject_script(self, spec: ScriptSpec) -> ScriptHandle: ...


FrameCallback = Callable[[], None]


def engine_ready(candidate: Any) -> bool:
    """Return whether ``candidate`` exposes a callable ``typeset`` operation."""
    return candidate is not None and callable(getattr(candidate, "typeset", None))


def frame_requester(host: Any) -> Callable[[FrameCallback], Any] | None:
    """Return the host's ``request_frame`` hook when it provides one."""
    requester = getattr(host, "request_frame", None)
    return requester if callable(requester) else None


__all__ = [
    "FrameCallback",
    "ScriptHandle",
    "ScriptSpec",
    "TypesetEngine",
    "TypesetHost",
    "engine_ready",
    "frame_requester",
]
