"""
Shared metrics configuration for the Heritage Console.
"""

from typing import Any, Dict, Optional
import time
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram


class ClientMetrics:
    """Prometheus metrics for a single request client.

    Each instance registers on its own registry unless one is supplied, so
    several clients (and test runs) never collide on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up request client metrics."""

        self._metrics["http_requests_total"] = Counter(
            "console_http_requests_total",
            "Total backend requests issued by the console client",
            ["method", "outcome"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "console_http_request_duration_seconds",
            "Backend request duration in seconds, retries included",
            ["method"],
            registry=self.registry
        )

        self._metrics["cache_events_total"] = Counter(
            "console_cache_events_total",
            "Response cache lookups and stores",
            ["event"],
            registry=self.registry
        )

        self._metrics["deduplicated_requests_total"] = Counter(
            "console_deduplicated_requests_total",
            "GET calls served by an identical in-flight request",
            registry=self.registry
        )

        self._metrics["retries_total"] = Counter(
            "console_retries_total",
            "Re-attempts of failed backend calls",
            registry=self.registry
        )

    def record_http_request(self, method: str, outcome: str, duration: float):
        """Record a settled backend request."""
        self._metrics["http_requests_total"].labels(method=method, outcome=outcome).inc()
        self._metrics["http_request_duration_seconds"].labels(method=method).observe(duration)

    def record_cache_event(self, event: str):
        """Record a cache hit, miss or store."""
        self._metrics["cache_events_total"].labels(event=event).inc()

    def increment_counter(self, metric_name: str):
        """Increment an unlabelled counter metric."""
        self._metrics[metric_name].inc()

    def sample(self, name: str, **labels) -> float:
        """Current value of a sample, 0.0 when never recorded."""
        value = self.registry.get_sample_value(name, labels or None)
        return value or 0.0

    @contextmanager
    def time_request(self, method: str):
        """Time a backend request and record its outcome."""
        start_time = time.monotonic()
        outcome = "error"
        try:
            yield
            outcome = "success"
        finally:
            self.record_http_request(method, outcome, time.monotonic() - start_time)
