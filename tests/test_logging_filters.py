"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    REDACTED,
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_for_logs,
    redact,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired to an in-memory stream through the production filters."""

    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    logger.propagate = True


def _last_payload(stream: StringIO) -> dict:
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_sensitive_filter_redacts_session_material(capture):
    """Session ids, cookies and passwords never reach the sink."""

    logger, stream = capture
    logger.info(
        "session_event",
        extra={
            "session_id": "tok-abc",
            "cookie": "auth_session=tok-abc",
            "password": "password123",
            "session_hash": "0f1e2d3c",
        },
    )

    output = stream.getvalue()
    assert "tok-abc" not in output
    assert "password123" not in output

    payload = _last_payload(stream)
    assert payload["session_id"] == REDACTED
    assert payload["cookie"] == REDACTED
    assert payload["session_hash"] == "0f1e2d3c"


def test_sensitive_filter_redacts_client_addresses(capture):
    logger, stream = capture
    logger.warning(
        "rate_limit_event",
        extra={
            "identifier": "203.0.113.9",
            "client_ip": "203.0.113.9",
            "client_hash": "abc123",
            "remaining": 0,
        },
    )

    output = stream.getvalue()
    assert "203.0.113.9" not in output

    payload = _last_payload(stream)
    assert payload["client_hash"] == "abc123"
    assert payload["remaining"] == 0


def test_sensitive_filter_allows_safe_fields(capture):
    """Verify safe fields pass through unmodified."""

    logger, stream = capture
    logger.info(
        "safe_event",
        extra={
            "route": "/api/auth/me",
            "status": 200,
            "duration_ms": 1.5,
        },
    )

    payload = _last_payload(stream)
    assert payload["route"] == "/api/auth/me"
    assert payload["status"] == 200
    assert REDACTED not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts(capture):
    """Ensure nested sensitive fields are redacted, case-insensitively."""

    logger, stream = capture
    logger.info(
        "nested_event",
        extra={
            "headers": {
                "Cookie": "auth_session=secret-token",
                "X-Forwarded-For": "198.51.100.1, 10.0.0.1",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()
    assert "secret-token" not in output
    assert "198.51.100.1" not in output

    headers = _last_payload(stream)["headers"]
    assert headers["Cookie"] == REDACTED
    assert headers["user-agent"] == "pytest"


def test_request_id_is_attached_from_context(capture):
    logger, stream = capture

    set_request_id("req-42")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert _last_payload(stream)["request_id"] == "req-42"


def test_exception_info_is_serialized(capture):
    logger, stream = capture

    try:
        raise RuntimeError("sweep exploded")
    except RuntimeError:
        logger.exception("job_failed")

    payload = _last_payload(stream)
    assert payload["level"] == "error"
    assert "RuntimeError: sweep exploded" in payload["exc_info"]


def test_redact_handles_lists_of_mappings():
    value = [{"token": "t1", "name": "a"}, ("plain",)]

    assert redact(value) == [{"token": REDACTED, "name": "a"}, ("plain",)]


def test_hash_for_logs_is_stable_and_hides_value():
    digest = hash_for_logs("192.0.2.44")

    assert digest == hash_for_logs("192.0.2.44")
    assert digest != hash_for_logs("192.0.2.45")
    assert len(digest) == 16
    assert "192.0.2.44" not in digest
