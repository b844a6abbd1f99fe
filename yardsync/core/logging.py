"""Structured logging setup with correlation context propagation.

Every export/import runs inside a ``correlation_scope`` so all records it
emits, across the exporter, analyzer, executor and the store, can be tied
back to one operation and the collection being processed at the time.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class CorrelationContext:
    """Correlation identifiers for grouping related log records."""

    operation_id: str | None = None
    operation: str | None = None
    collection: str | None = None


_EMPTY_CONTEXT = CorrelationContext()
_CORRELATION_CONTEXT: contextvars.ContextVar[CorrelationContext | None] = contextvars.ContextVar(
    "yardsync_correlation_context",
    default=None,
)


def get_correlation_context() -> CorrelationContext:
    """Return current correlation IDs for the active execution context.

    Reads from ``contextvars`` so async call chains share per-operation
    metadata without threading IDs through every function signature.
    """

    context = _CORRELATION_CONTEXT.get()
    if context is None:
        return _EMPTY_CONTEXT
    return context


class CorrelationFilter(logging.Filter):
    """Inject correlation fields into every ``LogRecord`` before formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        context: CorrelationContext = get_correlation_context()
        record.operation_id = context.operation_id
        record.operation = context.operation
        record.collection = context.collection
        return True


class _JsonFormatter(logging.Formatter):
    """Render logs as compact JSON for machine-readable ingestion."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object | None] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "operation_id": getattr(record, "operation_id", None),
            "operation": getattr(record, "operation", None),
            "collection": getattr(record, "collection", None),
        }
        if record.exc_info is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    """Configure root logging once with correlation-aware handlers."""

    root_logger: logging.Logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.filters.clear()

    handler = logging.StreamHandler(stream=sys.stderr)
    if json_output:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s "
            "operation=%(operation)s operation_id=%(operation_id)s collection=%(collection)s "
            "%(message)s",
        )
    handler.setFormatter(formatter)

    correlation_filter = CorrelationFilter()
    handler.addFilter(correlation_filter)
    root_logger.addFilter(correlation_filter)
    root_logger.addHandler(handler)


@contextmanager
def correlation_scope(
    *,
    operation_id: str | None = None,
    operation: str | None = None,
    collection: str | None = None,
) -> Iterator[None]:
    """Temporarily apply correlation IDs to the current async execution context.

    Nested scopes inherit outer values unless explicitly overridden, so the
    per-collection scope inside an import keeps the import's operation id.
    """

    current: CorrelationContext = get_correlation_context()
    updated = CorrelationContext(
        operation_id=current.operation_id if operation_id is None else operation_id,
        operation=current.operation if operation is None else operation,
        collection=current.collection if collection is None else collection,
    )
    token: contextvars.Token[CorrelationContext | None] = _CORRELATION_CONTEXT.set(updated)
    try:
        yield
    finally:
        _CORRELATION_CONTEXT.reset(token)


__all__ = [
    "CorrelationContext",
    "CorrelationFilter",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
]
