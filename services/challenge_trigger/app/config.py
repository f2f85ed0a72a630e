"""
Configuration for the challenge trigger job.
"""

from __future__ import annotations

import math
import os

from shared.framework.config import ServiceConfig, env_float, env_int
from shared.utils.errors import ConfigurationError

DEFAULT_METRICS_URL = "https://88pqpqlu5f.execute-api.eu-west-2.amazonaws.com/dev_1/3-months-aggregate"
DEFAULT_CHALLENGE_URL = "https://jkipopyatb.execute-api.eu-west-2.amazonaws.com/dev/challenge-creation"

INVALID_VALUE_POLICIES = ("drop", "error")


class ChallengeTriggerConfig(ServiceConfig):
    """Job configuration loaded from environment variables."""

    def __init__(self) -> None:
        super().__init__(service_name="challenge_trigger")

        self.service_slug = "challenge-trigger"

        # Backing store
        self.table_name = os.getenv("CHALLENGE_TRIGGER_TABLE", "leaderboard")
        self.scan_page_size = env_int("CHALLENGE_TRIGGER_SCAN_PAGE_SIZE", "0") or None

        # Downstream endpoints
        self.metrics_url = os.getenv("CHALLENGE_TRIGGER_METRICS_URL", DEFAULT_METRICS_URL)
        self.challenge_url = os.getenv("CHALLENGE_TRIGGER_CHALLENGE_URL", DEFAULT_CHALLENGE_URL)

        # Per-day rate fallback: rates at or below the threshold mean "no data"
        self.default_rate_threshold = env_float("CHALLENGE_TRIGGER_DEFAULT_RATE_THRESHOLD", "0.1")
        self.default_rate = env_float("CHALLENGE_TRIGGER_DEFAULT_RATE", "2.5")

        # What to do with metric values that do not parse as integers
        self.invalid_value_policy = os.getenv(
            "CHALLENGE_TRIGGER_INVALID_VALUE_POLICY",
            "drop",
        ).lower()

        # 1 keeps bucket processing strictly sequential
        self.bucket_concurrency = env_int("CHALLENGE_TRIGGER_BUCKET_CONCURRENCY", "1")

        self.include_end_date = (
            os.getenv("CHALLENGE_TRIGGER_INCLUDE_END_DATE", "false").lower() == "true"
        )

        self.validate()

    def validate(self) -> None:
        """Reject settings the pipeline cannot honour."""
        if not self.table_name:
            raise ConfigurationError("table_name is required", config_key="table_name")

        for key in ("metrics_url", "challenge_url"):
            value = getattr(self, key)
            if not value.startswith(("http://", "https://")):
                raise ConfigurationError(
                    f"{key} must be an http(s) URL",
                    config_key=key,
                    config_value=value,
                )

        if self.invalid_value_policy not in INVALID_VALUE_POLICIES:
            raise ConfigurationError(
                f"Invalid value policy: {self.invalid_value_policy}",
                config_key="invalid_value_policy",
                config_value=self.invalid_value_policy,
            )

        if self.bucket_concurrency < 1:
            raise ConfigurationError(
                "bucket_concurrency must be at least 1",
                config_key="bucket_concurrency",
                config_value=self.bucket_concurrency,
            )

        # Both must be finite and non-negative for every reported average to be >= 0
        for key in ("default_rate", "default_rate_threshold"):
            value = getattr(self, key)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"{key} must be a finite non-negative number",
                    config_key=key,
                    config_value=value,
                )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            {
                "table_name": self.table_name,
                "scan_page_size": self.scan_page_size,
                "metrics_url": self.metrics_url,
                "challenge_url": self.challenge_url,
                "default_rate_threshold": self.default_rate_threshold,
                "default_rate": self.default_rate,
                "invalid_value_policy": self.invalid_value_policy,
                "bucket_concurrency": self.bucket_concurrency,
                "include_end_date": self.include_end_date,
            }
        )
        return data
