"""
S1 Palette Metrics Collection
In-process metrics collection for monitoring and performance tracking.
"""
import time
from collections import Counter, defaultdict, deque
from functools import partial
from contextlib import contextmanager
from typing import Any, Deque, Dict, Iterable, Optional
from threading import Lock

from s1palette.config import config


class MetricsCollector:
    """Simple in-process metrics collector."""

    def __init__(self, window: int = config.METRICS_WINDOW):
        """Initialize metrics collector keeping the last `window` samples per series."""
        self._lock = Lock()
        self._counters: Dict[str, int] = Counter()
        self._timings: Dict[str, Deque[float]] = defaultdict(partial(deque, maxlen=window))
        self._palette_sizes: Deque[int] = deque(maxlen=window)
        self._start_time = time.time()

    def increment_request_count(self):
        """Increment total palette request counter."""
        with self._lock:
            self._counters["palette_requests_total"] += 1

    def increment_method_count(self, method: str):
        """Increment extraction method usage counter."""
        with self._lock:
            self._counters[f"palette_method_total_{method}"] += 1

    def increment_deadline_exceeded(self):
        """Increment k-means soft deadline counter."""
        with self._lock:
            self._counters["kmeans_deadline_exceeded_total"] += 1

    def increment_failure_count(self, error_type: str):
        """Increment failure counter by error type."""
        with self._lock:
            self._counters[f"palette_failed_total_{error_type}"] += 1

    def record_timing(self, operation: str, duration_ms: float):
        """Record timing for an operation."""
        with self._lock:
            self._timings[f"{operation}_duration_ms"].append(duration_ms)

    def record_palette_size(self, size: int):
        """Record final palette length."""
        with self._lock:
            self._palette_sizes.append(size)

    def get_counters(self) -> Dict[str, int]:
        """Get current counter values."""
        with self._lock:
            return dict(self._counters)

    def get_timing_stats(self) -> Dict[str, Dict[str, float]]:
        """Get timing statistics."""
        with self._lock:
            stats = {}
            for operation, timings in self._timings.items():
                if timings:
                    stats[operation] = {
                        "count": len(timings),
                        "mean": sum(timings) / len(timings),
                        "min": min(timings),
                        "max": max(timings),
                        "p50": self._percentile(timings, 50),
                        "p95": self._percentile(timings, 95)
                    }
            return stats

    def get_palette_size_stats(self) -> Dict[str, float]:
        """Get final palette size statistics."""
        with self._lock:
            if not self._palette_sizes:
                return {}

            return {
                "count": len(self._palette_sizes),
                "mean": sum(self._palette_sizes) / len(self._palette_sizes),
                "min": min(self._palette_sizes),
                "max": max(self._palette_sizes)
            }

    def get_uptime_seconds(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """Get complete metrics summary."""
        return {
            "uptime_seconds": self.get_uptime_seconds(),
            "counters": self.get_counters(),
            "timing_stats": self.get_timing_stats(),
            "palette_size_stats": self.get_palette_size_stats()
        }

    def reset(self):
        """Reset all metrics (for testing)."""
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._palette_sizes.clear()
            self._start_time = time.time()

    @staticmethod
    def _percentile(data: Iterable[float], percentile: int) -> float:
        """Calculate percentile of data."""
        if not data:
            return 0.0

        sorted_data = sorted(data)
        k = (len(sorted_data) - 1) * percentile / 100
        f = int(k)
        c = k - f

        if f + 1 < len(sorted_data):
            return sorted_data[f] + c * (sorted_data[f + 1] - sorted_data[f])
        else:
            return sorted_data[f]


# Global metrics instance
_metrics: Optional[MetricsCollector] = None


def get_metrics_instance() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _metrics
    if _metrics is not None:
        _metrics.reset()


@contextmanager
def performance_monitor(operation_name: str, timings: Optional[Dict[str, float]] = None):
    """
    Context manager timing a pipeline stage.

    The duration is recorded in the global collector and, when given, in
    ``timings[operation_name]`` (milliseconds).
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        get_metrics_instance().record_timing(operation_name, duration_ms)
        if timings is not None:
            timings[operation_name] = duration_ms
