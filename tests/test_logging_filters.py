"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from meeting_edge.core.logging import JsonFormatter, SensitiveDataFilter


def _capturing_logger(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_api_keys():
    logger, stream = _capturing_logger("test_redaction")

    logger.info(
        "auth.failed",
        extra={
            "api_key": "sk-secret-123",
            "x-api-key": "another-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "sk-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_session_access_data():
    """Tokens and join links grant access to a meeting."""
    logger, stream = _capturing_logger("test_session_redaction")

    logger.info(
        "session.published",
        extra={
            "token": "abc123xyz",
            "join_url": "https://zoom.example/j/123?pwd=hunter2",
            "group_id": "g1",
        },
    )

    output = stream.getvalue()

    assert "abc123xyz" not in output
    assert "hunter2" not in output
    assert "g1" in output


def test_sensitive_filter_allows_safe_fields():
    logger, stream = _capturing_logger("test_safe_fields")

    logger.info(
        "rate_limit.exceeded",
        extra={
            "request_id": "req-123",
            "client_hash": "deadbeef",
            "limit": 100,
            "retry_after_s": 12,
        },
    )

    data = json.loads(stream.getvalue())

    assert data["message"] == "rate_limit.exceeded"
    assert data["request_id"] == "req-123"
    assert data["limit"] == 100
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    logger, stream = _capturing_logger("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "x-api-key": "secret-key",
                "user-agent": "pytest",
            },
            "query": {"group_id": "g1", "token": "abc123xyz"},
        },
    )

    output = stream.getvalue()

    assert "secret-key" not in output
    assert "abc123xyz" not in output
    assert "pytest" in output
    assert "g1" in output
