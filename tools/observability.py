"""Observability helpers for instrumenting gateway and advisory calls."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from aura_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

# Calls slower than this are logged at WARNING even when they succeed.
SLOW_CALL_MS = 5000.0


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _argument_summary(args: tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    # Bound methods carry ``self`` first; only the shape of the rest is logged.
    return {"positional": max(len(args) - 1, 0), "keywords": sorted(kwargs)}


def instrument_call(call_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a blocking remote call with start, failure, slow and completion events.

    Failures are logged with the exception type and, for gateway errors, the
    HTTP status, then re-raised unchanged.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            log_event(
                LOGGER,
                logging.DEBUG,
                "remote_call_started",
                call=call_name,
                correlation_id=correlation_id,
                **_argument_summary(args, kwargs),
            )
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "remote_call_failed",
                    call=call_name,
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(start),
                    error_type=type(exc).__name__,
                    status_code=getattr(exc, "status_code", None),
                    error=str(exc),
                )
                raise

            duration_ms = _elapsed_ms(start)
            slow = duration_ms >= SLOW_CALL_MS
            log_event(
                LOGGER,
                logging.WARNING if slow else logging.INFO,
                "remote_call_slow" if slow else "remote_call_completed",
                call=call_name,
                correlation_id=correlation_id,
                duration_ms=duration_ms,
            )
            return result

        return wrapper

    return decorator


__all__ = ["SLOW_CALL_MS", "instrument_call"]
