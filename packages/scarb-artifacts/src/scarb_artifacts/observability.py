"""Structured logging and tracing of artifact resolution.

Log events and spans carry the package and manifest being worked on, so a
failure inside a merge of several test builds points at the file that
caused it. Logging output is left to the application's structlog setup.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

LOGGER_NAME = "scarb_artifacts"
TRACER_NAME = "scarb.artifacts"

# Span attributes are namespaced, log keys are not
ATTRIBUTE_PREFIX = "scarb."


def get_logger(**context: Any) -> BoundLogger:
    """Get the package logger, bound to `context` if given.

    Example:
        >>> log = get_logger(package="basic_package")
        >>> log.debug("manifest_loaded", contracts=2)
    """
    logger: BoundLogger = structlog.get_logger(LOGGER_NAME)
    return logger.bind(**context) if context else logger


@lru_cache(maxsize=1)
def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for scarb-artifacts."""
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def resolution_span(
    name: str,
    *,
    package: str | None = None,
    manifest: Path | None = None,
    completed_level: str = "info",
    **attributes: Any,
) -> Iterator[Span]:
    """Trace one resolution step and log its outcome.

    Logs `<name>_started` at debug, `<name>_completed` with the duration at
    `completed_level`, and `<name>_failed` at error before re-raising.
    None-valued context is dropped.

    Args:
        name: Step name (e.g. "resolve_contracts", "load_manifest").
        package: Name of the package being resolved.
        manifest: Manifest file being loaded.
        completed_level: Log level of the completion event.
        **attributes: Further context for the span and log events.

    Example:
        >>> with resolution_span("load_manifest", package="basic_package", manifest=path):
        ...     load_manifest(path)
    """
    context = {
        "package": package,
        "manifest": str(manifest) if manifest is not None else None,
        **attributes,
    }
    context = {key: value for key, value in context.items() if value is not None}
    log = get_logger(**context)
    span_attributes = {f"{ATTRIBUTE_PREFIX}{key}": value for key, value in context.items()}

    started = time.perf_counter()
    with get_tracer().start_as_current_span(
        name,
        kind=SpanKind.INTERNAL,
        attributes=span_attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as s:
        log.debug(f"{name}_started")
        try:
            yield s
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            log.error(f"{name}_failed", error=str(exc), error_type=type(exc).__name__)
            raise
        s.set_status(Status(StatusCode.OK))
        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        getattr(log, completed_level)(f"{name}_completed", duration_ms=duration_ms)
