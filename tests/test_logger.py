"""Tests for the JSON log line layout."""

from __future__ import annotations

import io
import json

from portal.logger import REDACTED, StructuredLogger


def _lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_event_is_lifted_and_credentials_masked() -> None:
    stream = io.StringIO()
    log = StructuredLogger(name="tests.logger.audit", level="INFO", stream=stream, to_file=False)

    log.info(
        "User authenticated: %s", "ana@example.com",
        extra={"event": "LOGIN", "user_id": 7, "token": "secret-token"},
    )

    [entry] = _lines(stream)
    assert entry["event"] == "LOGIN"
    assert entry["message"] == "User authenticated: ana@example.com"
    assert entry["extra"] == {"user_id": "7", "token": REDACTED}
    assert "secret-token" not in stream.getvalue()


def test_level_filters_lower_records() -> None:
    stream = io.StringIO()
    log = StructuredLogger(name="tests.logger.level", level="WARNING", stream=stream, to_file=False)

    log.info("quiet")
    log.warning("loud")

    assert [entry["message"] for entry in _lines(stream)] == ["loud"]
    assert "extra" not in _lines(stream)[0]


def test_same_name_reuses_handlers() -> None:
    stream = io.StringIO()
    first = StructuredLogger(name="tests.logger.shared", level="INFO", stream=stream, to_file=False)
    second = StructuredLogger(name="tests.logger.shared", level="INFO", stream=io.StringIO(), to_file=False)

    second.info("once")

    assert first.logger is second.logger
    assert len(second.logger.handlers) == 1
    assert len(_lines(stream)) == 1
