"""In-process observability helpers: tool latency and event counters."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass
class LatencySummary:
    """Aggregated latency metrics for one operation."""

    count: int = 0
    error_count: int = 0
    total_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    last_ms: float = 0.0

    def add(self, duration_ms: float, *, ok: bool) -> None:
        if self.count == 0:
            self.min_ms = duration_ms
            self.max_ms = duration_ms
        else:
            self.min_ms = min(self.min_ms, duration_ms)
            self.max_ms = max(self.max_ms, duration_ms)
        self.count += 1
        if not ok:
            self.error_count += 1
        self.total_ms += duration_ms
        self.last_ms = duration_ms

    def as_dict(self) -> dict[str, float | int]:
        return {
            "count": self.count,
            "error_count": self.error_count,
            "total_ms": round(self.total_ms, 3),
            "avg_ms": round(self.total_ms / self.count if self.count else 0.0, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "last_ms": round(self.last_ms, 3),
        }


class _MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._latency: dict[str, LatencySummary] = {}
        self._counters: Counter[str] = Counter()

    def record(self, *, operation: str, duration_ms: float, ok: bool) -> None:
        normalized = max(float(duration_ms), 0.0)
        with self._lock:
            self._latency.setdefault(operation, LatencySummary()).add(
                normalized, ok=ok
            )
        logger.debug(
            "latency operation=%s duration_ms=%.3f ok=%s",
            operation,
            normalized,
            ok,
        )

    def increment(self, name: str, amount: int) -> None:
        with self._lock:
            self._counters[name] += amount

    def latency(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {
                operation: summary.as_dict()
                for operation, summary in sorted(self._latency.items())
            }

    def counters(self) -> dict[str, int]:
        with self._lock:
            return dict(sorted(self._counters.items()))

    def reset(self) -> None:
        with self._lock:
            self._latency.clear()
            self._counters.clear()


_REGISTRY = _MetricsRegistry()


def record_latency(*, operation: str, duration_ms: float, ok: bool = True) -> None:
    """Record one latency sample."""
    _REGISTRY.record(operation=operation, duration_ms=duration_ms, ok=ok)


def increment_counter(name: str, amount: int = 1) -> None:
    """Bump a named event counter (e.g. ``drift.events_created``)."""
    _REGISTRY.increment(name, amount)


def latency_metrics_snapshot() -> dict[str, dict[str, float | int]]:
    """Return current in-process latency aggregates."""
    return _REGISTRY.latency()


def counters_snapshot() -> dict[str, int]:
    """Return current event counter values."""
    return _REGISTRY.counters()


def reset_metrics() -> None:
    """Clear all latency aggregates and counters (test helper)."""
    _REGISTRY.reset()
