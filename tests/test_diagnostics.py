from __future__ import annotations

import logging

import pytest

from texstatement.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    format_event_message,
)
from texstatement.core.exceptions import (
    TypesetEngineUnavailable,
    exception_hint,
    exception_messages,
)


def _raise_nested_error() -> None:
    try:
        raise TimeoutError("script took too long")
    except TimeoutError as exc:
        raise TypesetEngineUnavailable("MathJax did not load") from exc


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False
    assert isinstance(emitter, DiagnosticEmitter)


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.ERROR):
        emitter.error("boom")
    assert any(record.message == "boom" for record in caplog.records)
    assert emitter.debug_enabled is True


def test_logging_emitter_hides_traceback_unless_debug(caplog: pytest.LogCaptureFixture) -> None:
    error = RuntimeError("detail")
    with caplog.at_level(logging.WARNING):
        LoggingEmitter().warning("quiet", error)
        LoggingEmitter(debug_enabled=True).warning("loud", error)

    records = {record.message: record for record in caplog.records}
    assert records["quiet"].exc_info is None
    assert records["loud"].exc_info is not None


def test_logging_emitter_formats_known_events(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.DEBUG):
        emitter.event("typeset_pass", {"targets": 2})
        emitter.event("custom", {"flag": True})

    messages = [record.message for record in caplog.records]
    assert "Typesetting math in 2 target(s)" in messages
    assert any("custom" in message for message in messages)


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        ("typeset_engine_load", {"source": "cdn"}, "Loading typesetting engine from cdn"),
        ("typeset_engine_unavailable", {}, "Typesetting engine unavailable (unknown reason)"),
        ("typeset_pass", {"targets": None}, "Typesetting math in whole document"),
        ("other", {}, None),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str | None) -> None:
    assert format_event_message(name, payload) == expected


def test_exception_hint_reports_root_cause() -> None:
    try:
        _raise_nested_error()
    except TypesetEngineUnavailable as error:
        messages = exception_messages(error)
        hint = exception_hint(error)
    assert messages == ["MathJax did not load", "script took too long"]
    assert hint == "script took too long"
