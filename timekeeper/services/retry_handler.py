"""
Retry handler with exponential backoff, jitter and a circuit breaker for
calls to the attendance provider.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Optional

from timekeeper.exceptions import ExternalServiceError
from timekeeper.services.error_classifier import ErrorClassifier

logger = logging.getLogger(__name__)


class RetryExhaustedError(ExternalServiceError):
    """All retry attempts failed; carries the last error's message."""


class CircuitBreakerError(ExternalServiceError):
    """The provider failed too often recently; calls are short-circuited."""


class RetryHandler:
    """
    Retries transient provider failures.

    - Exponential backoff capped at ``max_delay`` with random jitter
    - Circuit breaker opening after ``circuit_breaker_threshold`` exhausted calls
    - Retry decision delegated to ``ErrorClassifier`` unless overridden
    - Thread-safe; one handler is shared by all job workers
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2,
        jitter_factor: float = 0.1,
        circuit_breaker_threshold: int = 10,
        circuit_breaker_timeout: float = 60.0,
        retry_condition: Optional[Callable[[Exception], bool]] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        """
        Initialize retry handler.

        Args:
            max_retries: Maximum number of retry attempts after the first call
            base_delay: Base delay for exponential backoff (seconds)
            max_delay: Maximum delay between retries (seconds)
            exponential_base: Base for exponential backoff calculation
            jitter_factor: Factor for random jitter (0.0 to 1.0)
            circuit_breaker_threshold: Exhausted calls before opening the circuit
            circuit_breaker_timeout: Seconds before a half-open retry is allowed
            retry_condition: Custom predicate deciding whether to retry
            classifier: Error classifier used by the default predicate
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter_factor = jitter_factor
        self.circuit_breaker_threshold = circuit_breaker_threshold
        self.circuit_breaker_timeout = circuit_breaker_timeout
        self.classifier = classifier or ErrorClassifier()
        self.retry_condition = retry_condition or self.classifier.is_retryable

        self._circuit_open = False
        self._circuit_opened_at = 0.0
        self._failure_count = 0

        self._total_calls = 0
        self._total_retries = 0
        self._total_failures = 0

        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config) -> "RetryHandler":
        return cls(max_retries=config.max_retries, base_delay=config.retry_delay)

    def _calculate_delay(self, attempt: int) -> float:
        """
        Delay before retry number ``attempt`` (0-based), with jitter applied.
        """
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay
        return max(0, delay + jitter)

    def _is_circuit_open(self) -> bool:
        with self._lock:
            if not self._circuit_open:
                return False
            if time.time() - self._circuit_opened_at >= self.circuit_breaker_timeout:
                logger.info("Circuit breaker half-open; allowing a trial call")
                return False
            return True

    def _record_success(self):
        with self._lock:
            self._failure_count = 0
            if self._circuit_open:
                logger.info("Circuit breaker closed after successful call")
                self._circuit_open = False

    def _record_failure(self):
        with self._lock:
            self._failure_count += 1
            self._total_failures += 1
            if not self._circuit_open and self._failure_count >= self.circuit_breaker_threshold:
                logger.warning(
                    "Circuit breaker opened after %d failures", self._failure_count
                )
                self._circuit_open = True
                self._circuit_opened_at = time.time()

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        Call ``func`` and retry transient failures.

        Returns:
            Result of ``func``

        Raises:
            CircuitBreakerError: If the circuit breaker is open
            RetryExhaustedError: If every attempt failed with a retryable error
            Exception: The original exception when it is not retryable
        """
        with self._lock:
            self._total_calls += 1

        if self._is_circuit_open():
            raise CircuitBreakerError(
                "Attendance provider circuit breaker is open", retryable=True
            )

        func_name = getattr(func, "__name__", repr(func))

        for attempt in range(self.max_retries + 1):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                if not self.retry_condition(e):
                    logger.debug("Not retrying %s: %s", func_name, type(e).__name__)
                    raise

                if attempt >= self.max_retries:
                    logger.warning(
                        "Max retries (%d) exceeded for %s", self.max_retries, func_name
                    )
                    with self._lock:
                        self._total_retries += attempt
                    self._record_failure()
                    raise RetryExhaustedError(
                        f"Max retries ({self.max_retries}) exceeded. "
                        f"Last error: {self.classifier.describe(e)}: {e}",
                        retryable=True,
                    ) from e

                delay = self._calculate_delay(attempt)
                logger.debug(
                    "Retrying %s in %.2fs (attempt %d/%d): %s",
                    func_name,
                    delay,
                    attempt + 1,
                    self.max_retries + 1,
                    e,
                )
                time.sleep(delay)
                continue

            if attempt > 0:
                logger.info("%s succeeded after %d retries", func_name, attempt)
                with self._lock:
                    self._total_retries += attempt
            self._record_success()
            return result

    def get_retry_statistics(self) -> dict:
        with self._lock:
            return {
                "total_calls": self._total_calls,
                "total_retries": self._total_retries,
                "total_failures": self._total_failures,
                "circuit_breaker_open": self._circuit_open,
                "failure_count": self._failure_count,
            }

    def reset_circuit_breaker(self):
        """Manually close the circuit breaker."""
        with self._lock:
            self._circuit_open = False
            self._failure_count = 0
            self._circuit_opened_at = 0.0
        logger.info("Circuit breaker manually reset")
