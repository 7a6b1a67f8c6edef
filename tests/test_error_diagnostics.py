"""Tests for structured error payloads."""

from __future__ import annotations

from query_cache.errors import (
    ErrorCode,
    QueryCacheError,
    SweepError,
    describe_exception,
    sanitize_context,
    wrap_error,
)


def test_describe_exception_follows_cause_chain() -> None:
    try:
        try:
            raise KeyError("missing")
        except KeyError as inner:
            raise ValueError("outer") from inner
    except ValueError as exc:
        payload = describe_exception(exc)

    assert payload["type"] == "ValueError"
    assert payload["cause"]["type"] == "KeyError"


def test_to_dict_embeds_cause_and_redacts_context() -> None:
    wrapped = SweepError(
        "Sweep failed",
        context={"interval_ms": 5, "api_token": "abc"},
        cause=RuntimeError("boom"),
    )

    payload = wrapped.to_dict()

    assert payload["code"] == ErrorCode.SWEEP.value
    assert payload["message"] == "Sweep failed"
    assert payload["context"] == {"interval_ms": 5, "api_token": "***REDACTED***"}
    assert payload["cause"]["message"] == "boom"


def test_wrap_error_enriches_existing_errors() -> None:
    original = SweepError("tick failed")

    result = wrap_error(original, message="ignored", context={"tick": 3})

    assert result is original
    assert result.context == {"tick": 3}


def test_wrap_error_wraps_foreign_exceptions() -> None:
    cause = OSError("disk")

    result = wrap_error(cause, SweepError, message="Sweep failed")

    assert isinstance(result, SweepError)
    assert isinstance(result, QueryCacheError)
    assert result.__cause__ is cause


def test_sanitize_context_handles_nested_values() -> None:
    sanitized = sanitize_context({"params": {"password": "x", "id": 1}, "keys": ("a", "b")})

    assert sanitized == {"params": {"password": "***REDACTED***", "id": 1}, "keys": ["a", "b"]}
