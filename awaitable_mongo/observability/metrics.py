"""
Metrics collection for awaitable-mongo.

Counts and times every delegated driver call so callers can see how the
adapter is being used without adding their own instrumentation. Metrics are
keyed by operation name plus tags, e.g.
``collection.insert_one[collection_key=users]``.
"""

import functools
import threading
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from pymongo.errors import PyMongoError

from ..constants import MAX_METRICS
from ..exceptions import AwaitableMongoError

T = TypeVar("T")


@dataclass
class CallStats:
    """Running totals for one metric key."""

    operation_name: str
    count: int = 0
    error_count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0

    def add(self, duration_ms: float, success: bool) -> None:
        self.count += 1
        self.total_duration_ms += duration_ms
        self.max_duration_ms = max(self.max_duration_ms, duration_ms)
        if not success:
            self.error_count += 1

    def snapshot(self) -> dict[str, Any]:
        avg = self.total_duration_ms / self.count if self.count else 0.0
        return {
            "count": self.count,
            "error_count": self.error_count,
            "avg_duration_ms": round(avg, 2),
            "max_duration_ms": round(self.max_duration_ms, 2),
        }


class MetricsCollector:
    """
    Thread-safe, bounded collector of per-operation call stats.

    When ``max_metrics`` keys exist, recording a new key evicts the one that
    was recorded least recently.
    """

    def __init__(self, max_metrics: int = MAX_METRICS):
        self._stats: OrderedDict[str, CallStats] = OrderedDict()
        self._lock = threading.Lock()
        self._max_metrics = max_metrics

    @staticmethod
    def _key(operation_name: str, tags: dict[str, Any]) -> str:
        if not tags:
            return operation_name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{operation_name}[{tag_str}]"

    def record_operation(
        self, operation_name: str, duration_ms: float, success: bool = True, **tags: Any
    ) -> None:
        key = self._key(operation_name, tags)
        with self._lock:
            stats = self._stats.get(key)
            if stats is None:
                if len(self._stats) >= self._max_metrics:
                    self._stats.popitem(last=False)
                stats = self._stats[key] = CallStats(operation_name)
            else:
                self._stats.move_to_end(key)
            stats.add(duration_ms, success)

    def snapshot(self, prefix: str = "") -> dict[str, dict[str, Any]]:
        """Stats for every key starting with ``prefix``, keyed by metric key."""
        with self._lock:
            return {
                key: stats.snapshot()
                for key, stats in self._stats.items()
                if key.startswith(prefix)
            }

    def _totals(self, operation_name: str) -> tuple[int, int]:
        with self._lock:
            matching = [s for s in self._stats.values() if s.operation_name == operation_name]
            return sum(s.count for s in matching), sum(s.error_count for s in matching)

    def get_operation_count(self, operation_name: str) -> int:
        """Calls recorded for ``operation_name``, across all tags."""
        return self._totals(operation_name)[0]

    def get_error_count(self, operation_name: str) -> int:
        """Failed calls recorded for ``operation_name``, across all tags."""
        return self._totals(operation_name)[1]

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()


_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def record_operation(
    operation_name: str, duration_ms: float, success: bool = True, **tags: Any
) -> None:
    """Record an operation in the global metrics collector."""
    get_metrics_collector().record_operation(operation_name, duration_ms, success, **tags)


def timed_operation(
    operation_name: str, **tags: Any
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator that records each call of a coroutine function.

    Driver errors and this package's own errors count as failures; the error
    is re-raised unchanged.

    Usage:
        @timed_operation("connection.connect")
        async def connect(...):
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            start_time = time.time()
            success = True
            try:
                return await func(*args, **kwargs)
            except (PyMongoError, AwaitableMongoError):
                success = False
                raise
            finally:
                duration_ms = (time.time() - start_time) * 1000
                record_operation(operation_name, duration_ms, success, **tags)

        return wrapper

    return decorator
