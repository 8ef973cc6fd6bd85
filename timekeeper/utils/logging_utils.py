"""Structured logging utilities with thread-local context support."""

import functools
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, cast

_thread_local = threading.local()

SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "apikey",
    "x-api-key",
    "secret",
    "private_key",
    "credentials",
    "authorization",
}


def get_log_context() -> Dict[str, Any]:
    """
    Get a copy of the context fields active on this thread.

    Returns:
        Dictionary of context fields (empty when none are set)
    """
    return dict(getattr(_thread_local, "context", {}))


class LogContext:
    """
    Context manager adding structured fields to every log record in scope.

    Job workers use it to tag their records with the job being executed:

        with LogContext(job_id=42, job_kind="external-sync"):
            logger.info("Importing attendance records")

    Contexts nest; leaving a scope restores the fields of the enclosing one.
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        self.previous_context = get_log_context()
        merged = dict(self.previous_context)
        merged.update(self.fields)
        _thread_local.context = merged
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self.previous_context or {}


class _ContextFilter(logging.Filter):
    """Logging filter that copies the thread's context fields onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_log_context().items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact values of sensitive keys, recursing into nested dictionaries.

    Used before request headers or provider configuration are logged.

    Args:
        data: Dictionary to sanitize

    Returns:
        Sanitized copy with sensitive values redacted
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "***REDACTED***" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(cast(Dict[str, Any], value))
        else:
            sanitized[key] = value
    return sanitized


def log_operation(
    func: Optional[Callable] = None, *, level: str = "INFO"
) -> Callable:
    """
    Decorator logging start, completion time and failure of an operation.

    Args:
        func: Function to decorate (when used without arguments)
        level: Log level for the start and completion lines

    Returns:
        Decorated function

    Example:
        @log_operation
        def cleanup_duplicates(self):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            log_level = getattr(logging, level.upper())
            started = time.monotonic()
            logger.log(log_level, "Starting %s", f.__name__)
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "%s failed after %.2fs: %s: %s",
                    f.__name__,
                    time.monotonic() - started,
                    type(e).__name__,
                    e,
                )
                raise
            logger.log(
                log_level, "Finished %s in %.2fs", f.__name__, time.monotonic() - started
            )
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
