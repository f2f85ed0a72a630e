"""
Utility modules for the challenge trigger job.

Provides common utilities for:
- Structured logging
- Error handling
"""

from .logging import setup_logging, bind_run_id, clear_run_id, get_run_id
from .errors import (
    DataProcessingError,
    StoreScanError,
    MetricsCallError,
    MalformedMetricsResponseError,
    SubmissionError,
    ConfigurationError,
)

__all__ = [
    "setup_logging",
    "bind_run_id",
    "clear_run_id",
    "get_run_id",
    "DataProcessingError",
    "StoreScanError",
    "MetricsCallError",
    "MalformedMetricsResponseError",
    "SubmissionError",
    "ConfigurationError",
]
