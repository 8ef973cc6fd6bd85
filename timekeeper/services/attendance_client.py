"""
REST client for the external attendance provider.

The provider authenticates with an ``X-API-Key`` header and returns either
plain JSON lists or paginated envelopes of the form
``{"data": [...], "meta": {"lastPage": n}}``.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests
from pydantic import ValidationError

from timekeeper.calculators.time_utils import parse_time
from timekeeper.exceptions import ExternalServiceError
from timekeeper.models.values import AttendanceRecord
from timekeeper.services.attendance_provider import AttendanceProvider
from timekeeper.services.error_classifier import ErrorClassifier
from timekeeper.services.retry_handler import RetryHandler
from timekeeper.utils.logging_utils import sanitize_sensitive_data

logger = logging.getLogger(__name__)

TIMESHEETS_PATH = "/api/data/timesheets"
CURRENT_PERIOD_PATH = "/api/data/periods/current"


def parse_hours_logged(value: Any) -> Optional[float]:
    """
    Convert "HH:MM" / "HH:MM:SS" strings or plain numbers to decimal hours.

    Example:
        >>> parse_hours_logged("07:30:00")
        7.5
    """
    if value is None or value == "":
        return None
    text = str(value).strip()
    if isinstance(value, (int, float)) or ":" not in text:
        return round(float(text), 2)
    parts = [int(p or 0) for p in text.split(":")]
    parts += [0] * (3 - len(parts))
    hours, minutes, seconds = parts[:3]
    return round(hours + minutes / 60 + seconds / 3600, 2)


def parse_api_record(raw: Dict[str, Any]) -> AttendanceRecord:
    """
    Map one provider row onto an AttendanceRecord.

    Raises:
        ValueError: If required fields are missing or malformed
    """
    hours = parse_hours_logged(raw.get("hours_logged"))
    if hours is None:
        hours = parse_hours_logged(raw.get("hours_worked"))
    return AttendanceRecord(
        external_id=raw.get("id"),
        worker_id=raw.get("worker_id"),
        date=str(raw.get("entry_date", ""))[:10],
        start_time=parse_time(raw.get("start_time")),
        end_time=parse_time(raw.get("end_time")),
        hours=hours,
        company=raw.get("school_name") or raw.get("company"),
        status=raw.get("status"),
        period_id=raw.get("period_id"),
    )


class AttendanceApiClient(AttendanceProvider):
    """
    Attendance provider backed by the provider's REST API.

    Args:
        base_url: Root URL of the provider
        api_key: Key sent in the X-API-Key header
        retry_handler: Retry policy for transient failures
        timeout: Per-request timeout in seconds
        session: Optional requests session (a new one is created otherwise)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        retry_handler: Optional[RetryHandler] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ExternalServiceError("Attendance provider URL is not configured")
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.retry_handler = retry_handler or RetryHandler()
        self.classifier = self.retry_handler.classifier
        self.session = session or requests.Session()
        self.session.headers.update(
            {"X-API-Key": api_key or "", "Content-Type": "application/json"}
        )
        logger.debug(
            "Attendance client configured: %s",
            sanitize_sensitive_data({"base_url": self.base_url, "api_key": api_key}),
        )

    @classmethod
    def from_config(cls, config) -> "AttendanceApiClient":
        return cls(
            base_url=config.attendance_api_url,
            api_key=config.attendance_api_key,
            retry_handler=RetryHandler.from_config(config),
            timeout=config.attendance_api_timeout,
        )

    def _send(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = urljoin(self.base_url, path.lstrip("/"))
        clean_params = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        response = self.session.get(url, params=clean_params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` with retries; failures surface as ExternalServiceError."""
        try:
            return self.retry_handler.execute_with_retry(self._send, path, params)
        except ExternalServiceError:
            raise
        except (requests.exceptions.RequestException, ValueError) as e:
            raise self.classifier.to_external_error(e) from e

    def _get_all_pages(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        page = 1
        while True:
            data = self._get(path, {**params, "page": page})
            if isinstance(data, list):
                results.extend(data)
                break
            results.extend(data.get("data") or [])
            last_page = (data.get("meta") or {}).get("lastPage")
            if not last_page or page >= last_page:
                break
            page += 1
        return results

    def get_current_period(self) -> Optional[Dict[str, Any]]:
        try:
            period = self._get(CURRENT_PERIOD_PATH)
        except ExternalServiceError as e:
            if e.status_code == 404:
                logger.info("Attendance provider reports no current period")
                return None
            raise
        return period or None

    def fetch_records(
        self, worker_id: str, period_id: Optional[str] = None
    ) -> List[AttendanceRecord]:
        """
        Fetch every record of a worker, following pagination.

        Rows that cannot be parsed are logged and skipped.
        """
        rows = self._get_all_pages(
            TIMESHEETS_PATH, {"workerId": worker_id, "periodId": period_id}
        )
        records = []
        for row in rows:
            try:
                records.append(parse_api_record(row))
            except (ValidationError, ValueError) as e:
                logger.warning("Skipping malformed provider row %s: %s", row.get("id"), e)
        logger.info("Fetched %d records for worker %s", len(records), worker_id)
        return records
