"""
Custom error classes for the challenge trigger job.

Provides structured error handling with error codes,
context information, and proper exception chaining.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Error context information."""
    service: str
    operation: str
    table: Optional[str] = None
    bucket_id: Optional[str] = None
    correlation_id: Optional[str] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


class DataProcessingError(Exception):
    """Base exception for data processing errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        result = {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        if self.context:
            result["context"] = {
                "service": self.context.service,
                "operation": self.context.operation,
                "table": self.context.table,
                "bucket_id": self.context.bucket_id,
                "correlation_id": self.context.correlation_id,
                "metadata": self.context.metadata,
            }

        return result


class StoreScanError(DataProcessingError):
    """Error raised when the backing store rejects a scan page request."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="STORE_SCAN_ERROR",
            context=context,
            details=details or {}
        )
        self.table = table

        if table:
            self.details["table"] = table


class MetricsCallError(DataProcessingError):
    """Error raised when the activity metrics endpoint cannot be reached."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="METRICS_CALL_ERROR",
            context=context,
            details=details or {}
        )
        self.url = url
        self.status = status

        if url:
            self.details["url"] = url
        if status is not None:
            self.details["status"] = status


class MalformedMetricsResponseError(DataProcessingError):
    """Error raised when the metrics response is not a user-to-value mapping."""

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="MALFORMED_METRICS_RESPONSE",
            context=context,
            details=details or {}
        )
        self.user_id = user_id
        self.value = value

        if user_id:
            self.details["user_id"] = user_id
        if value is not None:
            self.details["value"] = str(value)


class SubmissionError(DataProcessingError):
    """Error raised when the challenge-creation call fails."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="SUBMISSION_ERROR",
            context=context,
            details=details or {}
        )
        self.url = url
        self.status = status

        if url:
            self.details["url"] = url
        if status is not None:
            self.details["status"] = status


class ConfigurationError(DataProcessingError):
    """Error raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            context=context,
            details=details or {}
        )
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details["config_key"] = config_key
        if config_value is not None:
            self.details["config_value"] = str(config_value)


def create_error_context(
    service: str,
    operation: str,
    table: Optional[str] = None,
    bucket_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> ErrorContext:
    """Create error context."""
    return ErrorContext(
        service=service,
        operation=operation,
        table=table,
        bucket_id=bucket_id,
        correlation_id=correlation_id,
        metadata=metadata or {}
    )
