"""
Logging utilities for awaitable-mongo.

Every record emitted through ``get_logger`` carries the caller's correlation
ID and, while a driver call is in flight, the database and collection it
targets. Tasks copy the current context when they are created, so an ID set
in a request handler follows each operation that handler schedules.
"""

import contextlib
import contextvars
import logging
import uuid
from collections.abc import Iterator
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Fields describing the driver call currently running in this context
_operation_scope: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "operation_scope", default=None
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Set a correlation ID in the current context.

    Args:
        correlation_id: Optional correlation ID (generates new one if None)

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextlib.contextmanager
def operation_scope(
    operation: str, database: str, collection_key: str | None = None
) -> Iterator[None]:
    """
    Attach the target of a driver call to every record logged inside the block.

    The previous scope is restored on exit, so nested scopes do not leak.
    """
    fields: dict[str, Any] = {"operation": operation, "database": database}
    if collection_key is not None:
        fields["collection_key"] = collection_key
    token = _operation_scope.set(fields)
    try:
        yield
    finally:
        _operation_scope.reset(token)


def get_logging_context() -> dict[str, Any]:
    """Correlation ID and current operation scope, as ``extra`` fields."""
    context: dict[str, Any] = {}

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    scope = _operation_scope.get()
    if scope:
        context.update(scope)

    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that merges the logging context into each record's ``extra``.

    Fields passed explicitly through ``extra`` take precedence.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = get_logging_context()
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = context
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_driver_call(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    duration_ms: float,
    error: BaseException | None = None,
    success_level: int = logging.DEBUG,
    failure_level: int = logging.ERROR,
    **fields: Any,
) -> None:
    """
    Log the outcome of one call into the driver.

    A failure is logged at ``failure_level`` with the error's traceback;
    a success at ``success_level``.

    Args:
        logger: Logger (or contextual adapter) to emit on
        operation: Operation name, e.g. ``"insert_one"``
        duration_ms: Time spent in the driver call
        error: The error the call failed with, or None on success
        **fields: Extra structured fields (database, collection_key, ...)

    Example:
        log_driver_call(logger, "find_one", 3.2, collection_key="users")
        # DEBUG "find_one settled (3.20ms)"
    """
    extra: dict[str, Any] = {
        "operation": operation,
        "success": error is None,
        "duration_ms": round(duration_ms, 2),
        **fields,
    }

    if error is None:
        logger.log(success_level, f"{operation} settled ({duration_ms:.2f}ms)", extra=extra)
        return

    extra["error_type"] = type(error).__name__
    logger.log(
        failure_level,
        f"{operation} failed with {type(error).__name__} ({duration_ms:.2f}ms)",
        extra=extra,
        exc_info=error,
    )
