"""
Unit tests for provider error classification.
"""

import socket
from unittest.mock import Mock

import requests.exceptions
from googleapiclient.errors import HttpError

from timekeeper.exceptions import ExternalServiceError
from timekeeper.services.error_classifier import ErrorClassifier, ErrorType, http_status_of


def _http_error(status):
    response = Mock(status_code=status)
    return requests.exceptions.HTTPError(f"{status} error", response=response)


class TestErrorClassifier:
    """Test cases for ErrorClassifier."""

    def test_rate_limit_error_429_is_retryable(self):
        """Test that 429 errors are classified as retryable."""
        classifier = ErrorClassifier()

        assert classifier.classify(_http_error(429)) == ErrorType.RETRYABLE
        assert classifier.is_retryable(_http_error(429))

    def test_server_errors_5xx_are_retryable(self):
        """Test that 5xx errors from either transport are retryable."""
        classifier = ErrorClassifier()
        for status in [500, 502, 503, 504]:
            google_error = HttpError(resp=Mock(status=status), content=b"{}")

            assert classifier.is_retryable(_http_error(status))
            assert classifier.is_retryable(google_error)

    def test_client_errors_4xx_are_fatal(self):
        """Test that 4xx errors (except 429) are classified as fatal."""
        classifier = ErrorClassifier()
        for status in [400, 401, 403, 404]:
            assert classifier.classify(_http_error(status)) == ErrorType.FATAL

    def test_network_errors_are_retryable(self):
        """Test that network errors are classified as retryable."""
        classifier = ErrorClassifier()
        for error in [
            socket.timeout("Connection timed out"),
            requests.exceptions.ConnectionError("Connection failed"),
            requests.exceptions.Timeout("Request timed out"),
        ]:
            assert classifier.is_retryable(error)

    def test_external_service_error_uses_retryable_flag(self):
        """Test errors without a status code follow their retryable flag."""
        classifier = ErrorClassifier()

        assert classifier.is_retryable(ExternalServiceError("busy", retryable=True))
        assert not classifier.is_retryable(ExternalServiceError("bad config"))
        assert classifier.is_retryable(ExternalServiceError("down", status_code=503))

    def test_unknown_errors(self):
        """Test unrelated exceptions are classified as unknown."""
        classifier = ErrorClassifier()

        assert classifier.classify(KeyError("x")) == ErrorType.UNKNOWN
        assert classifier.get_statistics() == {
            "retryable": 0,
            "fatal": 0,
            "unknown": 1,
            "total": 1,
        }

    def test_describe(self):
        """Test human-readable descriptions."""
        classifier = ErrorClassifier()

        assert classifier.describe(_http_error(429)) == "Rate limit error (HTTP 429)"
        assert classifier.describe(_http_error(401)) == "Authentication error (HTTP 401)"
        assert classifier.describe(_http_error(503)) == "Server error (HTTP 503)"
        assert classifier.describe(_http_error(404)) == "Client error (HTTP 404)"
        assert classifier.describe(requests.exceptions.Timeout()) == "Network timeout error"

    def test_to_external_error(self):
        """Test transport errors are wrapped with status and retry flag."""
        classifier = ErrorClassifier()

        error = classifier.to_external_error(_http_error(503))

        assert isinstance(error, ExternalServiceError)
        assert error.status_code == 503
        assert error.retryable is True
        assert error.message.startswith("Server error (HTTP 503)")

    def test_http_status_of(self):
        """Test status extraction across exception types."""
        assert http_status_of(_http_error(418)) == 418
        assert http_status_of(HttpError(resp=Mock(status=500), content=b"")) == 500
        assert http_status_of(ValueError("x")) is None
