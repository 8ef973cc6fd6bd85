"""Interface of the external attendance provider."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from timekeeper.models.values import AttendanceRecord


class AttendanceProvider(ABC):
    """Source of authoritative attendance records.

    Implementations raise ``ExternalServiceError`` when the provider cannot
    be reached or rejects the request.
    """

    @abstractmethod
    def get_current_period(self) -> Optional[Dict[str, Any]]:
        """Return the provider's current pay period (``{"id": ...}``) if it has one."""

    @abstractmethod
    def fetch_records(
        self, worker_id: str, period_id: Optional[str] = None
    ) -> List[AttendanceRecord]:
        """Return all records of one worker, optionally limited to a period."""
