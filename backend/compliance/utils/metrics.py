"""Prometheus metrics for requirement transitions and sweeps."""

from prometheus_client import Counter, Histogram

requirement_transitions_total = Counter(
    "requirement_transitions_total",
    "Total applied requirement transitions",
    ["from_status", "to_status"],
)

requirement_transition_errors_total = Counter(
    "requirement_transition_errors_total",
    "Total rejected requirement transitions",
    ["kind"],
)

requirement_sweep_duration_ms = Histogram(
    "requirement_sweep_duration_ms",
    "Scheduling sweep duration in milliseconds",
    buckets=[10, 50, 100, 500, 1000, 5000, 10000, 60000],
)


class PrometheusEngineMetrics:
    """Prometheus-based engine metrics implementation."""

    def inc_transition(self, from_status: str, to_status: str) -> None:
        """Increment applied transition counter."""
        requirement_transitions_total.labels(from_status=from_status, to_status=to_status).inc()

    def inc_error(self, kind: str) -> None:
        """Increment error counter."""
        requirement_transition_errors_total.labels(kind=kind).inc()

    def record_sweep(self, latency_ms: float) -> None:
        """Record sweep latency."""
        requirement_sweep_duration_ms.observe(latency_ms)
