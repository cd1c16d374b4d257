"""Timing instrumentation for comparison calls.

``@profile_operation(name)`` wraps a synchronous function with
``time.perf_counter_ns()`` timing.  Each call is recorded in the
thread-safe :class:`ProfileCollector` singleton and logged at DEBUG level.

Usage::

    from delta_engine.telemetry.profiling import profile_operation

    @profile_operation("delta.compare")
    def compare(old, new, config=None):
        ...

The collector keeps the last ``max_results`` timings per operation and
exposes ``get_stats()`` for p50/p95/p99/mean aggregation.
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class ProfileResult:
    """Timing of a single profiled call."""

    operation: str
    duration_ms: float
    failed: bool = False


class ProfileCollector:
    """Thread-safe store of recent profile results per operation.

    Parameters
    ----------
    max_results:
        Maximum number of results to retain per operation name.
    """

    _instance: ProfileCollector | None = None
    _lock_cls = threading.Lock()

    def __init__(self, max_results: int = 100) -> None:
        self._max_results = max_results
        self._data: dict[str, deque[ProfileResult]] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> ProfileCollector:
        """Return the module-level singleton, creating it if needed."""
        if cls._instance is None:
            with cls._lock_cls:
                if cls._instance is None:
                    cls._instance = ProfileCollector()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (for testing)."""
        with cls._lock_cls:
            cls._instance = None

    def record(self, result: ProfileResult) -> None:
        with self._lock:
            if result.operation not in self._data:
                self._data[result.operation] = deque(maxlen=self._max_results)
            self._data[result.operation].append(result)

    def get_stats(self, operation: str) -> dict[str, Any] | None:
        """Aggregate the stored timings of *operation*.

        Returns ``None`` if nothing was recorded for the operation, otherwise
        ``{"operation", "count", "failures", "mean_ms", "p50_ms", "p95_ms",
        "p99_ms", "min_ms", "max_ms"}``.
        """
        with self._lock:
            results = list(self._data.get(operation, ()))
        if not results:
            return None

        durations = sorted(r.duration_ms for r in results)
        count = len(durations)
        return {
            "operation": operation,
            "count": count,
            "failures": sum(1 for r in results if r.failed),
            "mean_ms": round(sum(durations) / count, 3),
            "p50_ms": round(_percentile(durations, 50), 3),
            "p95_ms": round(_percentile(durations, 95), 3),
            "p99_ms": round(_percentile(durations, 99), 3),
            "min_ms": round(durations[0], 3),
            "max_ms": round(durations[-1], 3),
        }

    def operations(self) -> list[str]:
        with self._lock:
            return sorted(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


def _percentile(sorted_data: list[float], p: float) -> float:
    """Linear-interpolated p-th percentile of already sorted data."""
    n = len(sorted_data)
    k = (p / 100.0) * (n - 1)
    floor_k = int(k)
    ceil_k = min(floor_k + 1, n - 1)
    frac = k - floor_k
    return sorted_data[floor_k] + frac * (sorted_data[ceil_k] - sorted_data[floor_k])


def profile_operation(name: str) -> Callable[[F], F]:
    """Decorator that times a synchronous function.

    Parameters
    ----------
    name:
        The operation name for grouping (e.g. ``"delta.compare"``).
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_ns = time.perf_counter_ns()
            failed = True
            try:
                value = func(*args, **kwargs)
                failed = False
                return value
            finally:
                duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
                ProfileCollector.get_instance().record(
                    ProfileResult(operation=name, duration_ms=round(duration_ms, 3), failed=failed)
                )
                logger.debug("PROFILE %s: %.3f ms%s", name, duration_ms, " (failed)" if failed else "")

        return wrapper  # type: ignore[return-value]

    return decorator
