"""
Configuration management for the challenge trigger job.

Provides typed configuration classes with environment variable
injection and validation.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from shared.utils.errors import ConfigurationError

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


def env_int(name: str, default: str) -> int:
    """Read an integer environment variable, raising ConfigurationError if malformed."""
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be an integer",
            config_key=name,
            config_value=raw,
        ) from exc


def env_float(name: str, default: str) -> float:
    """Read a numeric environment variable, raising ConfigurationError if malformed."""
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a number",
            config_key=name,
            config_value=raw,
        ) from exc


@dataclass
class AwsConfig:
    """AWS configuration."""
    region: str = field(default_factory=lambda: os.getenv("AWS_REGION", "eu-west-2"))
    dynamodb_endpoint_url: Optional[str] = field(default_factory=lambda: os.getenv("CHALLENGE_TRIGGER_DYNAMODB_ENDPOINT"))


@dataclass
class HttpConfig:
    """Outbound HTTP configuration."""
    timeout_seconds: float = field(default_factory=lambda: env_float("CHALLENGE_TRIGGER_HTTP_TIMEOUT", "30"))


@dataclass
class ObservabilityConfig:
    """Observability configuration."""
    log_level: str = field(default_factory=lambda: os.getenv("CHALLENGE_TRIGGER_LOG_LEVEL", "info"))
    log_format: str = field(default_factory=lambda: os.getenv("CHALLENGE_TRIGGER_LOG_FORMAT", "json"))


@dataclass
class ServiceConfig:
    """Base service configuration."""
    service_name: str
    environment: str = field(default_factory=lambda: os.getenv("CHALLENGE_TRIGGER_ENV", "dev"))

    # Sub-configurations
    aws: AwsConfig = field(default_factory=AwsConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.service_name:
            raise ConfigurationError("service_name is required", config_key="service_name")

        if self.environment not in ["local", "dev", "staging", "prod"]:
            raise ConfigurationError(
                f"Invalid environment: {self.environment}",
                config_key="environment",
                config_value=self.environment,
            )

        if self.observability.log_level.lower() not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.observability.log_level}",
                config_key="log_level",
                config_value=self.observability.log_level,
            )

        if self.observability.log_format not in ["json", "console"]:
            raise ConfigurationError(
                f"Invalid log format: {self.observability.log_format}",
                config_key="log_format",
                config_value=self.observability.log_format,
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "service_name": self.service_name,
            "environment": self.environment,
            "aws": {
                "region": self.aws.region,
                "dynamodb_endpoint_url": self.aws.dynamodb_endpoint_url,
            },
            "http": {
                "timeout_seconds": self.http.timeout_seconds,
            },
            "observability": {
                "log_level": self.observability.log_level,
                "log_format": self.observability.log_format,
            },
        }
