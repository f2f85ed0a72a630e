"""
Prometheus instruments specific to the challenge trigger job.
"""

from __future__ import annotations

from typing import Optional

from shared.framework.metrics import MetricsCollector


class ChallengeTriggerMetrics:
    """Counters recorded by the aggregation pipeline."""

    def __init__(self, collector: Optional[MetricsCollector] = None) -> None:
        self.collector = collector or MetricsCollector("challenge_trigger")
        self.buckets = self.collector.create_counter(
            "buckets_total",
            "Number of buckets seen during assembly by status",
            labels=["status"],
        )
        self.default_rate = self.collector.create_counter(
            "default_rate_applied_total",
            "Number of buckets whose per-day rate fell back to the default",
        )
        self.invalid_values = self.collector.create_counter(
            "invalid_metric_values_total",
            "Number of activity values that could not be coerced to integers",
        )
        self.submissions = self.collector.create_counter(
            "submissions_total",
            "Number of challenge-creation submissions by status",
            labels=["status"],
        )

    def bucket_aggregated(self) -> None:
        self.buckets.labels(status="aggregated").inc()

    def bucket_skipped(self) -> None:
        self.buckets.labels(status="skipped").inc()

    def default_rate_applied(self) -> None:
        self.default_rate.inc()

    def invalid_value(self) -> None:
        self.invalid_values.inc()

    def submission(self, status: str) -> None:
        self.submissions.labels(status=status).inc()
