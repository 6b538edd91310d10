"""
tour_engines.tracer -- engine invocation tracer emitting TOUR_ENGINE_TRACE.

Responsibility:
    ``@traced_engine`` wraps a pure engine call with one structured log
    record carrying the engine name, version, a fingerprint of selected
    keyword arguments and the duration.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; inputs are never mutated.

Failure modes:
    - Fingerprint fields missing from kwargs are recorded as null.
    - Values that canonical JSON cannot encode fall back to ``repr``.

Usage:
    @traced_engine("period_rollup", "1.0", fingerprint_fields=("year", "month"))
    def build_period(*, year, month, bucket, ...):
        ...
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any

from tour_kernel.logging_config import get_logger
from tour_kernel.utils.hashing import hash_payload

_logger = get_logger("engines.tracer")


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """16-hex-char SHA-256 prefix over the selected keyword arguments."""
    selected = {}
    for name in fingerprint_fields:
        value = kwargs.get(name)
        try:
            hash_payload(value)
        except TypeError:
            value = repr(value)
        selected[name] = value
    return hash_payload(selected)[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits TOUR_ENGINE_TRACE for pure engine invocations."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.debug(
                "TOUR_ENGINE_TRACE",
                extra={
                    "trace_type": "TOUR_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
