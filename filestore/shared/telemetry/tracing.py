"""Span helpers for storage operations.

Every public FileStorageService operation is a coroutine, so `traced` only
wraps coroutine functions. Object bodies and credentials are never recorded:
argument attributes come from an allowlist of keyword names.
"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")

SpanValue = str | int | float | bool

# Keyword names recorded as `arg.<name>` span attributes (case-insensitive).
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "bucket", "prefix", "key", "route", "mime_type", "expiration",
    "concurrency_limit", "continuation_token", "fail_fast",
})


def _argument_attributes(kwargs: dict[str, Any]) -> dict[str, str]:
    return {
        f"arg.{name}": str(value)
        for name, value in kwargs.items()
        if value is not None and name.lower() in _SAFE_SPAN_ATTR_KEYS
    }


def traced(
    operation_name: str | None = None,
    attributes: dict[str, SpanValue] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Run a coroutine function inside its own span.

    The span is marked OK on return. On an exception it is marked ERROR, the
    exception is recorded, and the exception propagates unchanged.

    Args:
        operation_name: Span name (defaults to module.funcname).
        attributes: Static attributes set on every span.

    Raises:
        TypeError: the decorated callable is not a coroutine function.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"traced expects a coroutine function, got {func!r}")
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            span_attributes: dict[str, SpanValue] = dict(attributes or {})
            span_attributes.update(_argument_attributes(kwargs))
            with tracer.start_as_current_span(
                span_name,
                attributes=span_attributes,
                record_exception=False,
                set_status_on_exception=False,
            ) as span:
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: SpanValue) -> None:
    """Set attributes on the current span if it is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)


def add_span_event(name: str, **attributes: SpanValue) -> None:
    """Add an event to the current span if it is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes)
