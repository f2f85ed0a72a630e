"""Prometheus metrics collection for the challenge trigger job."""

from typing import Dict, Any, Optional

from prometheus_client import (
    Counter, Histogram, Info,
    CollectorRegistry, generate_latest
)


class MetricsCollector:
    """Centralized metrics collection for a run-to-completion job."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()
        self.metrics: Dict[str, Any] = {}

        self._init_common_metrics()

    def _init_common_metrics(self):
        """Initialize metrics every job run reports."""
        self.info = Info(
            f"{self.service_name}_info",
            f"Information about {self.service_name}",
            registry=self.registry
        )

        self.runs_total = Counter(
            f"{self.service_name}_runs_total",
            f"Total number of {self.service_name} invocations by outcome",
            ["status"],
            registry=self.registry
        )

        self.run_duration = Histogram(
            f"{self.service_name}_run_duration_seconds",
            f"End-to-end invocation duration in seconds for {self.service_name}",
            buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry
        )

        self.errors_total = Counter(
            f"{self.service_name}_errors_total",
            f"Total number of errors in {self.service_name}",
            ["error_type", "component"],
            registry=self.registry
        )

    def create_counter(self, name: str, description: str, labels: Optional[list] = None) -> Counter:
        """Create a custom counter metric."""
        full_name = f"{self.service_name}_{name}"
        counter = Counter(full_name, description, labels or [], registry=self.registry)
        self.metrics[name] = counter
        return counter

    def record_run(self, status: str, duration: float):
        """Record the outcome of one invocation."""
        self.runs_total.labels(status=status).inc()
        self.run_duration.observe(duration)

    def record_error(self, error_type: str, component: str):
        """Record an error metric."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_service_info(self, version: str, environment: str, **kwargs):
        """Update service information."""
        info_dict = {
            "version": version,
            "environment": environment,
            **kwargs
        }
        self.info.info(info_dict)

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self.registry)
