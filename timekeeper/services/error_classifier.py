"""
Classification of provider failures into retryable and fatal errors.
"""

import logging
import socket
from enum import Enum
from typing import Any, Dict, Optional

import requests.exceptions
from googleapiclient.errors import HttpError

from timekeeper.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Classification of error types."""

    RETRYABLE = "retryable"  # 429, 5xx, network errors
    FATAL = "fatal"  # other 4xx, authentication errors
    UNKNOWN = "unknown"


def http_status_of(exception: Exception) -> Optional[int]:
    """Extract the HTTP status code from any supported exception type."""
    if isinstance(exception, HttpError):
        return exception.resp.status
    if isinstance(exception, requests.exceptions.HTTPError):
        response = exception.response
        return response.status_code if response is not None else None
    if isinstance(exception, ExternalServiceError):
        return exception.status_code
    return None


class ErrorClassifier:
    """
    Decides whether a failed provider call may be retried.

    Handles both transports the engine talks to: the REST attendance API
    (``requests``) and the Google Sheets export (``googleapiclient``).
    Classification counts are kept for diagnostics.
    """

    def __init__(self):
        self._stats: Dict[str, int] = {"retryable": 0, "fatal": 0, "unknown": 0, "total": 0}

    def _count(self, error_type: ErrorType) -> ErrorType:
        self._stats["total"] += 1
        self._stats[error_type.value] += 1
        return error_type

    def classify(self, exception: Exception) -> ErrorType:
        """
        Classify an exception.

        Args:
            exception: The exception to classify

        Returns:
            ErrorType classification
        """
        if isinstance(exception, ExternalServiceError) and exception.status_code is None:
            return self._count(
                ErrorType.RETRYABLE if exception.retryable else ErrorType.FATAL
            )

        status_code = http_status_of(exception)
        if status_code is not None:
            if status_code == 429 or 500 <= status_code < 600:
                return self._count(ErrorType.RETRYABLE)
            if 400 <= status_code < 500:
                return self._count(ErrorType.FATAL)

        if isinstance(
            exception,
            (
                socket.timeout,
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
            ),
        ):
            return self._count(ErrorType.RETRYABLE)

        return self._count(ErrorType.UNKNOWN)

    def is_retryable(self, exception: Exception) -> bool:
        return self.classify(exception) == ErrorType.RETRYABLE

    def describe(self, exception: Exception) -> str:
        """
        Human-readable description used in job error messages.

        Args:
            exception: The exception to describe

        Returns:
            Description such as "Server error (HTTP 503)"
        """
        status_code = http_status_of(exception)
        if status_code == 429:
            return "Rate limit error (HTTP 429)"
        if status_code in (401, 403):
            return f"Authentication error (HTTP {status_code})"
        if status_code is not None and 500 <= status_code < 600:
            return f"Server error (HTTP {status_code})"
        if status_code is not None and 400 <= status_code < 500:
            return f"Client error (HTTP {status_code})"
        if isinstance(exception, (socket.timeout, requests.exceptions.Timeout)):
            return "Network timeout error"
        if isinstance(exception, requests.exceptions.ConnectionError):
            return "Network connection error"
        return f"{type(exception).__name__}: {exception}"

    def to_external_error(self, exception: Exception) -> ExternalServiceError:
        """Wrap a transport exception, preserving its message and status."""
        if isinstance(exception, ExternalServiceError):
            return exception
        error_type = self.classify(exception)
        return ExternalServiceError(
            f"{self.describe(exception)}: {exception}",
            status_code=http_status_of(exception),
            retryable=error_type == ErrorType.RETRYABLE,
        )

    def get_statistics(self) -> Dict[str, Any]:
        return self._stats.copy()

    def reset_statistics(self):
        self._stats = {"retryable": 0, "fatal": 0, "unknown": 0, "total": 0}
