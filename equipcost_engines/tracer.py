"""
equipcost_engines.tracer -- ``@traced_engine`` and EQUIPCOST_ENGINE_TRACE.

Responsibility:
    Wrap an engine entry point so that every log line it emits carries
    ``engine=<name>`` and so that each call ends with one
    EQUIPCOST_ENGINE_TRACE record: engine name and version, a fingerprint
    of the chosen inputs, and the elapsed time.

Architecture position:
    Engines -- support for the pure calculators. Emits log records only.

Invariants enforced:
    - The fingerprint depends only on the values of the chosen parameters,
      whether they were passed by position or by keyword. Mappings are
      keyed in sorted order; dataclasses are reduced to their fields.
    - A parameter the caller did not pass contributes its default value,
      or ``null`` when it has none.
    - No trace is written for a call that raises.

Usage:
    from equipcost_engines.tracer import traced_engine

    @traced_engine("scenario", "1.0", fingerprint_fields=("scenarios",))
    def compare(self, params, monthly_depreciation, scenarios):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from typing import Any

from equipcost_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.tracer")

TRACE_MESSAGE = "EQUIPCOST_ENGINE_TRACE"


def canonical_form(value: Any) -> str:
    """Stable text for a fingerprinted value."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return canonical_form(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        items = sorted((str(k), canonical_form(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(canonical_form(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """First 16 hex digits of the SHA-256 of the named arguments."""
    text = "|".join(
        f"{name}={canonical_form(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorator emitting EQUIPCOST_ENGINE_TRACE after each successful call.

    Args:
        engine_name: Bound as the ``engine`` log field during the call.
        engine_version: Reported in the trace record.
        fingerprint_fields: Parameter names hashed into ``input_fingerprint``.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            with LogContext.bind(engine=engine_name):
                started = time.monotonic()
                result = func(*args, **kwargs)
                logger.info(TRACE_MESSAGE, extra={
                    "trace_type": TRACE_MESSAGE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                    "function": func.__qualname__,
                })
            return result

        return wrapper

    return decorator
