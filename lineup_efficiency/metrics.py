"""Lightweight in-process metrics for tool calls.

Provides: MetricsCollector, get_metrics_collector, timing_decorator.
"""
from __future__ import annotations
import time, threading, inspect
from functools import wraps
from dataclasses import dataclass
from collections import defaultdict, deque
from datetime import datetime, UTC
from typing import Dict, Any, Callable

@dataclass
class MetricSummary:
    count: int = 0
    total: float = 0.0
    min_value: float = float('inf')
    max_value: float = float('-inf')
    last_updated: datetime | None = None

    @property
    def avg_value(self) -> float:
        return self.total / self.count if self.count else 0.0

class MetricsCollector:
    def __init__(self, max_samples: int = 10000):
        self._lock = threading.RLock()
        self._max_samples = max_samples
        self._counters: Dict[str, int] = defaultdict(int)
        self._timings: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self._max_samples))
        self._summaries: Dict[str, MetricSummary] = defaultdict(MetricSummary)

    def _make_key(self, name: str, labels: Dict[str, str]) -> str:
        if not labels:
            return name
        label_str = '|'.join(f'{k}={v}' for k, v in sorted(labels.items()))
        return f'{name}|{label_str}'

    def _update_summary(self, key: str, value: float) -> None:
        summary = self._summaries[key]
        summary.count += 1
        summary.total += value
        summary.min_value = min(summary.min_value, value)
        summary.max_value = max(summary.max_value, value)
        summary.last_updated = datetime.now(UTC)

    def increment_counter(self, name: str, value: int = 1, **labels) -> None:
        with self._lock:
            key = self._make_key(name, labels)
            self._counters[key] += value

    def record_timing(self, name: str, duration_ms: float, **labels) -> None:
        with self._lock:
            key = self._make_key(name, labels)
            self._timings[key].append(duration_ms)
            self._update_summary(key, duration_ms)

    def get_counter(self, name: str, **labels) -> int:
        with self._lock:
            return self._counters.get(self._make_key(name, labels), 0)

    def get_metrics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'timestamp': datetime.now(UTC).isoformat(),
                'counters': dict(self._counters),
                'timings': {
                    name: {
                        'count': s.count,
                        'total_ms': s.total,
                        'min_ms': 0 if s.min_value == float('inf') else s.min_value,
                        'max_ms': 0 if s.max_value == float('-inf') else s.max_value,
                        'avg_ms': s.avg_value,
                        'last_updated': s.last_updated.isoformat() if s.last_updated else None
                    } for name, s in self._summaries.items()
                }
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._summaries.clear()

_metrics = MetricsCollector()

def get_metrics_collector() -> MetricsCollector:
    return _metrics

def timing_decorator(metric_name: str, **labels):
    """Count calls by outcome and time them.

    Tool functions report failures in their response envelope, so a response
    with ``success`` False is counted as an error too.
    """
    def _status(res) -> str:
        if isinstance(res, dict) and res.get("success") is False:
            return "error"
        return "success"

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    res = await func(*args, **kwargs)
                    _metrics.increment_counter(f"{metric_name}_total", status=_status(res), **labels)
                    return res
                except Exception:
                    _metrics.increment_counter(f"{metric_name}_total", status="error", **labels)
                    raise
                finally:
                    dur = (time.perf_counter() - start) * 1000
                    _metrics.record_timing(f"{metric_name}_duration", dur, **labels)
            return async_wrapper
        else:
            @wraps(func)
            def sync_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    res = func(*args, **kwargs)
                    _metrics.increment_counter(f"{metric_name}_total", status=_status(res), **labels)
                    return res
                except Exception:
                    _metrics.increment_counter(f"{metric_name}_total", status="error", **labels)
                    raise
                finally:
                    dur = (time.perf_counter() - start) * 1000
                    _metrics.record_timing(f"{metric_name}_duration", dur, **labels)
            return sync_wrapper
    return decorator
