"""Centralised error taxonomy and helpers for the query cache."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from threading import Lock
from typing import Any, Mapping, MutableMapping, Type


class ErrorCode(str, Enum):
    """Stable identifiers for error categories used across the package."""

    KEY = "key"
    SWEEP = "sweep"
    UNKNOWN = "unknown"


_SENSITIVE_KEYS = {
    "password",
    "secret",
    "token",
    "apikey",
    "api_key",
    "authorization",
    "credential",
}
_REDACTED = "***REDACTED***"


def _safe_str(value: Any) -> str:
    try:
        text = str(value)
    except Exception:  # pragma: no cover - broken __str__
        text = repr(value)
    return text


def describe_exception(exc: BaseException, *, max_depth: int = 3) -> dict[str, Any]:
    """Return a serialisable description of ``exc`` and its causes."""

    seen: set[int] = set()

    def _describe(err: BaseException, depth: int) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": type(err).__name__,
            "message": _safe_str(err),
        }
        identity = id(err)
        if identity in seen:
            payload["cycle"] = True
            return payload
        seen.add(identity)

        if depth >= max_depth:
            return payload

        if err.__cause__ is not None:
            payload["cause"] = _describe(err.__cause__, depth + 1)
        elif err.__context__ is not None and not err.__suppress_context__:
            payload["context"] = _describe(err.__context__, depth + 1)
        return payload

    return _describe(exc, 0)


def _coerce(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Mapping):
        return sanitize_context(value)
    if isinstance(value, (list, tuple, set)):
        return [_coerce(v) for v in value]
    return repr(value)


def sanitize_context(context: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a shallow copy of ``context`` with sensitive values redacted."""

    if not context:
        return {}
    sanitized: dict[str, Any] = {}
    for key, value in context.items():
        key_str = str(key)
        lowered = key_str.lower()
        if any(token in lowered for token in _SENSITIVE_KEYS):
            sanitized[key_str] = _REDACTED
        else:
            sanitized[key_str] = _coerce(value)
    return sanitized


class QueryCacheError(Exception):
    """Base class for structured cache errors.

    ``context`` carries the key, prefix or sweep interval involved so log
    records can be filtered without parsing the message.
    """

    code: ErrorCode
    context: MutableMapping[str, Any]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | str = ErrorCode.UNKNOWN,
        context: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.context = dict(context or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **context: Any) -> "QueryCacheError":
        """Attach additional context to the error in-place."""

        for key, value in context.items():
            if value is not None:
                self.context[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return a serialisable payload describing the error."""

        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": str(self),
            "type": self.__class__.__name__,
        }
        if self.context:
            payload["context"] = sanitize_context(self.context)
        if self.cause is not None:
            payload["cause"] = describe_exception(self.cause)
        return payload


class CacheKeyError(QueryCacheError):
    def __init__(self, message: str = "Cache key cannot be derived", **kwargs: Any) -> None:
        super().__init__(message, code=ErrorCode.KEY, **kwargs)


class SweepError(QueryCacheError):
    def __init__(self, message: str = "Cache sweep failed", **kwargs: Any) -> None:
        super().__init__(message, code=ErrorCode.SWEEP, **kwargs)


def wrap_error(
    exc: BaseException,
    error_cls: Type[QueryCacheError] = QueryCacheError,
    *,
    message: str,
    context: Mapping[str, Any] | None = None,
) -> QueryCacheError:
    """Return a :class:`QueryCacheError` wrapping ``exc``.

    Existing :class:`QueryCacheError` instances are enriched with ``context``
    instead of being re-wrapped.
    """

    if isinstance(exc, QueryCacheError):
        if context:
            exc.add_context(**dict(context))
        return exc
    return error_cls(message, context=context, cause=exc)


_error_counts: Counter[str] = Counter()
_counter_lock = Lock()


def record_error(error: QueryCacheError) -> None:
    """Increment in-memory metrics for ``error``."""

    with _counter_lock:
        _error_counts[error.code.value] += 1


def get_error_metrics() -> dict[str, int]:
    """Return a snapshot of error counts by :class:`ErrorCode`."""

    with _counter_lock:
        return dict(_error_counts)


def reset_error_metrics() -> None:
    """Reset the in-memory error metrics (intended for tests)."""

    with _counter_lock:
        _error_counts.clear()


__all__ = [
    "CacheKeyError",
    "ErrorCode",
    "QueryCacheError",
    "SweepError",
    "describe_exception",
    "get_error_metrics",
    "record_error",
    "reset_error_metrics",
    "sanitize_context",
    "wrap_error",
]
