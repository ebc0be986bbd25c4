"""
Operation metrics for MONGOISH.

Client lifecycle calls and collection writes are timed and counted per
operation and, where there is one, per collection namespace
(``"animals.frogs"``). Stats live in memory in a bounded table; the least
recently updated entry is dropped first once the table is full.
"""

import functools
import inspect
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000


@dataclass
class OperationStats:
    """Running totals for one operation (optionally in one namespace)."""

    operation: str
    namespace: str | None = None
    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    slowest_ms: float = 0.0
    last_called: datetime | None = None

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    def add(self, duration_ms: float, success: bool) -> None:
        self.calls += 1
        self.total_ms += duration_ms
        self.slowest_ms = max(self.slowest_ms, duration_ms)
        if not success:
            self.failures += 1
        self.last_called = datetime.now()

    def as_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "namespace": self.namespace,
            "calls": self.calls,
            "failures": self.failures,
            "mean_ms": round(self.mean_ms, 3),
            "slowest_ms": round(self.slowest_ms, 3),
            "last_called": self.last_called.isoformat() if self.last_called else None,
        }


def _key(operation: str, namespace: str | None) -> str:
    return operation if namespace is None else f"{operation}@{namespace}"


class MetricsCollector:
    """
    Thread-safe, bounded table of ``OperationStats``.

    Entries are keyed ``"<operation>"`` or ``"<operation>@<namespace>"``.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._stats: "OrderedDict[str, OperationStats]" = OrderedDict()
        self._lock = threading.Lock()
        self.max_entries = max_entries

    def record(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        namespace: str | None = None,
    ) -> None:
        """
        Add one call to the stats of ``operation``.

        Args:
            operation: Operation name, e.g. ``"collection.insert_many"``
            duration_ms: Wall time of the call in milliseconds
            success: False if the call raised
            namespace: Optional ``"<db>.<collection>"`` the call targeted
        """
        key = _key(operation, namespace)
        with self._lock:
            stats = self._stats.get(key)
            if stats is None:
                if len(self._stats) >= self.max_entries:
                    evicted, _ = self._stats.popitem(last=False)
                    logger.debug(f"Metrics table full, dropped '{evicted}'")
                stats = self._stats[key] = OperationStats(operation, namespace)
            else:
                self._stats.move_to_end(key)
            stats.add(duration_ms, success)

    def snapshot(self, prefix: str | None = None) -> dict[str, dict[str, Any]]:
        """Return a copy of every entry, or of those whose key starts with ``prefix``."""
        with self._lock:
            return {
                key: stats.as_dict()
                for key, stats in self._stats.items()
                if prefix is None or key.startswith(prefix)
            }

    def calls(self, operation: str) -> int:
        """Total calls of ``operation`` across all namespaces."""
        with self._lock:
            return sum(s.calls for s in self._stats.values() if s.operation == operation)

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()

    def __len__(self) -> int:
        return len(self._stats)


_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the process-wide collector, creating it on first use."""
    global _collector
    if _collector is None:
        _collector = MetricsCollector()
    return _collector


def record_operation(
    operation: str, duration_ms: float, success: bool = True, namespace: str | None = None
) -> None:
    get_metrics_collector().record(operation, duration_ms, success, namespace)


def timed_operation(operation: str, namespace_attr: str | None = None):
    """
    Time every call of the decorated function or coroutine function.

    Args:
        operation: Name to record the calls under
        namespace_attr: Optional attribute of the first argument (``self``)
            holding the namespace, e.g. ``"full_name"`` on a ``Collection``

    Usage:
        @timed_operation("collection.insert_one", namespace_attr="full_name")
        async def _insert_one(self, document):
            ...
    """

    def decorator(func: Callable) -> Callable:
        def finish(args: tuple, started: float, success: bool) -> None:
            namespace = getattr(args[0], namespace_attr, None) if namespace_attr and args else None
            elapsed_ms = (time.perf_counter() - started) * 1000
            record_operation(operation, elapsed_ms, success, namespace)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def timed_coroutine(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception:
                    finish(args, started, False)
                    raise
                finish(args, started, True)
                return result

            return timed_coroutine

        @functools.wraps(func)
        def timed(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                finish(args, started, False)
                raise
            finish(args, started, True)
            return result

        return timed

    return decorator
