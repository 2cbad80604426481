"""OpenTelemetry and structlog instrumentation for plugin-ratings.

This module provides:
- get_tracer: thread-safe cached tracer with NoOp fallback
- traced: decorator creating a span around calculator operations
- add_trace_context / configure_logging: structlog setup with trace ids

Uses the OpenTelemetry API only (tracer from the global provider); without a
configured SDK every span is a no-op.

Example:
    >>> from plugin_ratings.telemetry import traced
    >>>
    >>> @traced(operation_name="ratings.calculate")
    ... def calculate(record): ...
"""

from __future__ import annotations

import functools
import logging
import sys
import threading
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, overload

import structlog
from opentelemetry import trace
from opentelemetry.trace import INVALID_SPAN_ID, INVALID_TRACE_ID, Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Callable

    from opentelemetry.trace import Tracer

P = ParamSpec("P")
R = TypeVar("R")

EventDict = MutableMapping[str, Any]

TRACER_NAME = "plugin-ratings"
"""OpenTelemetry instrumentation library name."""

_tracers: dict[str, Tracer] = {}
_tracer_init_failed: bool = False
_lock = threading.Lock()


# =============================================================================
# Tracer Access
# =============================================================================


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    """Get or create a cached tracer instance.

    Uses double-checked locking for lazy initialization and returns a
    NoOpTracer if OpenTelemetry initialization fails.

    Args:
        name: Instrumenting module name.

    Returns:
        OpenTelemetry Tracer instance for the given name.
    """
    global _tracer_init_failed

    if name in _tracers:
        return _tracers[name]

    if _tracer_init_failed:
        return trace.NoOpTracer()

    with _lock:
        if name in _tracers:
            return _tracers[name]

        if _tracer_init_failed:
            return trace.NoOpTracer()

        try:
            tracer = trace.get_tracer(name)
        except Exception:
            _tracer_init_failed = True
            return trace.NoOpTracer()
        _tracers[name] = tracer
        return tracer


def reset_tracer() -> None:
    """Clear cached tracers and the failure flag (test isolation)."""
    global _tracer_init_failed
    with _lock:
        _tracers.clear()
        _tracer_init_failed = False


# =============================================================================
# Traced Decorator
# =============================================================================


@overload
def traced(
    func: Callable[P, R],
    *,
    operation_name: str | None = ...,
    attributes: dict[str, Any] | None = ...,
) -> Callable[P, R]: ...


@overload
def traced(
    func: None = ...,
    *,
    operation_name: str | None = ...,
    attributes: dict[str, Any] | None = ...,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def traced(
    func: Callable[P, R] | None = None,
    *,
    operation_name: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator creating an OpenTelemetry span around a function.

    Can be used with or without parentheses. Exceptions are recorded on the
    span, which is marked as an error, and re-raised.

    Args:
        func: The function to decorate (when used without parentheses).
        operation_name: Custom span name. Defaults to the function name.
        attributes: Static attributes to add to the span.

    Returns:
        Decorated function that creates a span on each call.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            tracer = get_tracer()
            span_name = operation_name or fn.__name__

            with tracer.start_as_current_span(span_name) as span:
                span.set_attribute("plugin_ratings.operation", fn.__name__)
                if attributes:
                    for key, value in attributes.items():
                        span.set_attribute(key, value)

                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


# =============================================================================
# Logging
# =============================================================================


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor injecting trace_id and span_id of the active span."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.trace_id != INVALID_TRACE_ID and ctx.span_id != INVALID_SPAN_ID:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog with trace context injection.

    Args:
        log_level: Minimum level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render JSON lines instead of the console format.

    Raises:
        ValueError: If log_level is not a known level name.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level}"
        raise ValueError(msg)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_trace_context,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


__all__ = [
    "TRACER_NAME",
    "add_trace_context",
    "configure_logging",
    "get_tracer",
    "reset_tracer",
    "traced",
]
