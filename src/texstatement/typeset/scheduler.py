"""Debounced, single-flight MathJax typesetting.

Rendering is synchronous and pure; typesetting happens afterwards, out of
band. Every opted-in render call contributes a scope to a pending pass:

- calls made before the next tick coalesce into a single pass;
- a whole-document request absorbs any element scopes collected so far;
- element scopes from different calls are merged without duplicates.

When the pass runs, the engine is loaded at most once per scheduler (failed
loads are forgotten so that a later pass retries), previous typeset marks are
cleared for the scope and the scope is typeset. Failures are reported through
the diagnostics emitter and never reach the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import copy
from dataclasses import dataclass
from enum import Enum, auto
import logging
from threading import Lock
from typing import Any, ClassVar

from texstatement.core.config import SCRIPT_MARKER, TypesetConfig
from texstatement.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from texstatement.core.exceptions import (
    TypesetEngineUnavailable,
    TypesetHostError,
    exception_hint,
)

from .host import ScriptSpec, TypesetHost, engine_ready, frame_requester


logger = logging.getLogger(__name__)


class ScopeKind(Enum):
    """What a pending typeset pass covers."""

    NONE = auto()
    GLOBAL = auto()
    SCOPED = auto()


@dataclass(frozen=True, slots=True)
class PendingScope:
    """Scope accumulated for the next typeset pass."""

    kind: ScopeKind = ScopeKind.NONE
    targets: tuple[Any, ...] = ()

    def merge(self, targets: Iterable[Any] | None) -> PendingScope:
        """Return the scope obtained by adding a request for ``targets``.

        ``None`` or an empty request stands for the whole document. Targets are
        deduplicated by identity so that unhashable handles are accepted.
        """
        requested = [target for target in targets or () if target]
        if not requested:
            return PendingScope(ScopeKind.GLOBAL)
        if self.kind is ScopeKind.GLOBAL:
            return self

        merged = list(self.targets)
        for target in requested:
            if all(existing is not target for existing in merged):
                merged.append(target)
        return PendingScope(ScopeKind.SCOPED, tuple(merged))

    def elements(self) -> list[Any] | None:
        """Return the elements to typeset, ``None`` meaning the whole document."""
        if self.kind is ScopeKind.SCOPED:
            return list(self.targets)
        return None


class TypesetScheduler:
    """Coordinate engine loading and coalesced typeset passes for one host."""

    def __init__(
        self,
        host: TypesetHost | None = None,
        *,
        config: TypesetConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._host = host
        self._config = config or TypesetConfig()
        self._emitter: DiagnosticEmitter = emitter or LoggingEmitter(logger_obj=logger)
        self._load_future: asyncio.Future[Any] | None = None
        self._scheduled = False
        self._pending = PendingScope()
        self._passes: set[asyncio.Task[None]] = set()

    @property
    def host(self) -> TypesetHost | None:
        return self._host

    @property
    def config(self) -> TypesetConfig:
        return self._config

    @property
    def emitter(self) -> DiagnosticEmitter:
        return self._emitter

    @property
    def scheduled(self) -> bool:
        """Whether a pass is waiting for its tick."""
        return self._scheduled

    @property
    def pending(self) -> PendingScope:
        return self._pending

    def schedule(self, targets: Iterable[Any] | None = None) -> bool:
        """Request a typeset pass covering ``targets`` (``None``: whole document).

        Returns ``False`` without side effects when no host is installed or no
        event loop is running in the calling thread.
        """
        if self._host is None:
            logger.debug("Typeset requested without a host; skipping.")
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Typeset requested outside a running event loop; skipping.")
            return False

        self._pending = self._pending.merge(targets)
        if self._scheduled:
            return True
        self._scheduled = True

        def start_pass() -> None:
            task = loop.create_task(self.run_pass())
            self._passes.add(task)
            task.add_done_callback(self._passes.discard)

        requester = frame_requester(self._host)
        if requester is None:
            loop.call_soon(start_pass)
            return True
        try:
            requester(start_pass)
        except Exception as exc:
            self._emitter.warning("Host refused a frame callback; using the event loop.", exc)
            loop.call_soon(start_pass)
        return True

    async def run_pass(self) -> None:
        """Execute one typeset pass over the scope collected so far."""
        self._scheduled = False
        scope, self._pending = self._pending, PendingScope()

        engine = await self.ensure_engine()
        if engine is None:
            return

        elements = scope.elements()
        self._emitter.event(
            "typeset_pass", {"targets": None if elements is None else len(elements)}
        )
        try:
            clear = getattr(engine, "typeset_clear", None)
            if callable(clear):
                clear(elements)
            await engine.typeset(elements)
        except Exception as exc:
            self._emitter.warning("Math typesetting failed.", exc)

    async def ensure_engine(self) -> Any | None:
        """Return the loaded engine, loading it once if needed.

        Concurrent callers share the same load. ``None`` is returned when the
        engine cannot be loaded; the failed attempt is discarded.
        """
        host = self._host
        if host is None:
            return None
        current = getattr(host, "engine", None)
        if engine_ready(current):
            return current

        loop = asyncio.get_running_loop()
        future = self._load_future
        if future is None or future.get_loop() is not loop:
            future = loop.create_task(self._load_engine(host))
            future.add_done_callback(self._forget_failed_load)
            self._load_future = future

        try:
            await asyncio.shield(future)
        except TypesetEngineUnavailable:
            return None
        current = getattr(host, "engine", None)
        return current if engine_ready(current) else None

    def _forget_failed_load(self, future: asyncio.Future[Any]) -> None:
        if future.cancelled():
            reason = "load cancelled"
        else:
            error = future.exception()
            if error is None:
                return
            reason = exception_hint(error) or type(error).__name__
            if isinstance(error.__cause__, TypesetHostError):
                self._emitter.error("Typeset host cannot load scripts.", error.__cause__)
        if self._load_future is future:
            self._load_future = None
        self._emitter.event("typeset_engine_unavailable", {"reason": reason})

    async def _load_engine(self, host: TypesetHost) -> Any:
        timeout = self._config.load_timeout
        try:
            await asyncio.wait_for(self._wait_for_script(host), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise TypesetEngineUnavailable(
                f"MathJax did not load within {timeout:g} seconds"
            ) from exc
        except Exception as exc:
            raise TypesetEngineUnavailable("Failed to load MathJax script") from exc
        return getattr(host, "engine", None)

    async def _wait_for_script(self, host: TypesetHost) -> None:
        find_script = getattr(host, "find_script", None)
        inject_script = getattr(host, "inject_script", None)
        if not callable(find_script) or not callable(inject_script):
            raise TypesetHostError("Host cannot locate or inject scripts")
        if getattr(host, "engine", None) is None:
            host.engine = copy.deepcopy(self._config.engine_config)

        existing = find_script(self._config.script_selectors)
        if existing is None:
            spec = ScriptSpec(
                src=self._config.script_url,
                integrity=self._config.script_integrity,
                data={"mathjax": SCRIPT_MARKER},
            )
            self._emitter.event("typeset_engine_load", {"source": spec.src})
            await inject_script(spec).wait_loaded()
            return

        if engine_ready(host.engine):
            return
        self._emitter.event("typeset_engine_load", {"source": "existing script"})
        loaded = asyncio.ensure_future(existing.wait_loaded())
        try:
            # A script that finished loading before we subscribed never fires again.
            await asyncio.sleep(0)
            if engine_ready(host.engine):
                return
            await loaded
        finally:
            if not loaded.done():
                loaded.cancel()


class _DefaultScheduler:
    """Hold the process-wide scheduler used by :func:`texstatement.render`."""

    _instance: ClassVar[TypesetScheduler | None] = None
    _lock: ClassVar[Lock] = Lock()

    @classmethod
    def get(cls) -> TypesetScheduler:
        with cls._lock:
            if cls._instance is None:
                cls._instance = TypesetScheduler(emitter=NullEmitter())
            return cls._instance

    @classmethod
    def replace(cls, scheduler: TypesetScheduler) -> TypesetScheduler:
        with cls._lock:
            cls._instance = scheduler
            return scheduler


def get_typeset_scheduler() -> TypesetScheduler:
    """Return the process-wide scheduler, creating an inert one on first use."""
    return _DefaultScheduler.get()


def install_typeset_host(
    host: TypesetHost | None,
    *,
    config: TypesetConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> TypesetScheduler:
    """Bind the process-wide scheduler to ``host`` (``None`` disables typesetting)."""
    if host is None and emitter is None:
        emitter = NullEmitter()
    return _DefaultScheduler.replace(TypesetScheduler(host, config=config, emitter=emitter))


def schedule_typeset(targets: Iterable[Any] | None = None) -> bool:
    """Schedule a typeset pass on the process-wide scheduler."""
    return get_typeset_scheduler().schedule(targets)


__all__ = [
    "PendingScope",
    "ScopeKind",
    "TypesetScheduler",
    "get_typeset_scheduler",
    "install_typeset_host",
    "schedule_typeset",
]
