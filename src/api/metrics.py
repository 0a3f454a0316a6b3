"""Metrics service for tracking recommendation performance.

Singleton service counting recommendation calls, their latency and event
store failures.
"""

import threading
from typing import Dict


class MetricsService:
    """Singleton service for tracking API metrics.

    Thread-safe counters; the API serves sync routes from a thread pool.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._lock = threading.Lock()
        self._reset_counters()
        self._initialized = True

    def _reset_counters(self) -> None:
        self._recommendation_count = 0
        self._empty_result_count = 0
        self._store_failure_count = 0
        self._total_latency_ms = 0.0
        self._min_latency_ms = float("inf")
        self._max_latency_ms = 0.0

    def record_recommendation(self, latency_ms: float, num_results: int) -> None:
        """Record a completed recommendation call.

        Args:
            latency_ms: Latency in milliseconds
            num_results: Number of product ids returned
        """
        with self._lock:
            self._recommendation_count += 1
            if num_results == 0:
                self._empty_result_count += 1
            self._total_latency_ms += latency_ms
            self._min_latency_ms = min(self._min_latency_ms, latency_ms)
            self._max_latency_ms = max(self._max_latency_ms, latency_ms)

    def record_store_failure(self) -> None:
        with self._lock:
            self._store_failure_count += 1

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with:
            - recommendation_count: Completed recommendation calls
            - empty_result_count: Calls that returned no products
            - store_failure_count: Calls that failed on the event store
            - average_latency_ms / min_latency_ms / max_latency_ms
        """
        with self._lock:
            avg_latency = (
                self._total_latency_ms / self._recommendation_count
                if self._recommendation_count > 0
                else 0.0
            )

            return {
                "recommendation_count": self._recommendation_count,
                "empty_result_count": self._empty_result_count,
                "store_failure_count": self._store_failure_count,
                "average_latency_ms": round(avg_latency, 2),
                "min_latency_ms": (
                    round(self._min_latency_ms, 2)
                    if self._min_latency_ms != float("inf")
                    else 0.0
                ),
                "max_latency_ms": round(self._max_latency_ms, 2),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._reset_counters()


# Global singleton instance
metrics_service = MetricsService()
