"""
Observability components.

Provides structured logging and metrics collection.
"""

from .logging import (
    ContextualLoggerAdapter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_driver_call,
    operation_scope,
    set_correlation_id,
)
from .metrics import (
    CallStats,
    MetricsCollector,
    get_metrics_collector,
    record_operation,
    timed_operation,
)

__all__ = [
    # Metrics
    "CallStats",
    "MetricsCollector",
    "get_metrics_collector",
    "record_operation",
    "timed_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "operation_scope",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_driver_call",
]
