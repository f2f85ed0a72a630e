"""
Core framework components for run-to-completion jobs.

Provides configuration, outbound HTTP and metrics building blocks
shared by the job services.
"""

from .config import ServiceConfig, AwsConfig, HttpConfig, ObservabilityConfig
from .http_client import JSONHttpClient
from .metrics import MetricsCollector

__all__ = [
    "ServiceConfig",
    "AwsConfig",
    "HttpConfig",
    "ObservabilityConfig",
    "JSONHttpClient",
    "MetricsCollector",
]
