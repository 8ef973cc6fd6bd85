"""Clients for the external attendance provider and their retry support."""

from timekeeper.services.attendance_client import AttendanceApiClient
from timekeeper.services.attendance_provider import AttendanceProvider
from timekeeper.services.error_classifier import ErrorClassifier, ErrorType
from timekeeper.services.retry_handler import (
    CircuitBreakerError,
    RetryExhaustedError,
    RetryHandler,
)

__all__ = [
    "AttendanceApiClient",
    "AttendanceProvider",
    "CircuitBreakerError",
    "ErrorClassifier",
    "ErrorType",
    "RetryExhaustedError",
    "RetryHandler",
]
