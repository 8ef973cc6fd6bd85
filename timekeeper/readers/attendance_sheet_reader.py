"""Attendance records exported to Google Sheets.

Some deployments receive the provider's attendance data as a spreadsheet
export instead of through the REST API. This module reads that export and
exposes it through the same ``AttendanceProvider`` interface.

Expected columns (first row holds the headers):
- Record ID: Provider record id
- Worker ID: Provider worker id
- Date: YYYY-MM-DD, DD.MM.YYYY or MM/DD/YYYY
- Start Time / End Time: HH:MM (optional when Hours is given)
- Hours: Decimal hours or HH:MM
- Company: Company the work was booked against
- Status: Provider status string
- Period: Provider pay period id (optional)
"""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from timekeeper.calculators.time_utils import parse_time
from timekeeper.models.values import AttendanceRecord
from timekeeper.services.attendance_client import parse_hours_logged
from timekeeper.services.attendance_provider import AttendanceProvider
from timekeeper.services.google_sheets_service import GoogleSheetsService

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%m/%d/%Y")


def _cell(row: Dict[str, Any], column: str) -> str:
    value = str(row.get(column, "") or "").strip()
    return "" if value.lower() == "nan" else value


class AttendanceSheetReader:
    """Parses attendance export rows into AttendanceRecord objects.

    Attributes:
        sheets_service: Google Sheets service for data access

    Example:
        >>> reader = AttendanceSheetReader(GoogleSheetsService())
        >>> records = reader.read_records("spreadsheet-id-123", "Attendance")
    """

    def __init__(self, sheets_service: GoogleSheetsService):
        self.sheets_service = sheets_service

    def read_records(self, spreadsheet_id: str, range_name: str) -> List[AttendanceRecord]:
        """Read every parseable record in ``range_name``.

        Rows with a missing or malformed required field are skipped with a
        warning; they never abort the read.

        Raises:
            ExternalServiceError: If the sheet cannot be read
        """
        df = self.sheets_service.read_sheet(spreadsheet_id, range_name)
        if df.empty:
            logger.info("No attendance rows found in %s", spreadsheet_id)
            return []

        records = []
        for index, row in df.iterrows():
            record = self._parse_row(row.to_dict(), row_number=int(index) + 2)
            if record:
                records.append(record)

        logger.info("Parsed %d of %d attendance rows", len(records), len(df))
        return records

    def _parse_row(self, row: Dict[str, Any], row_number: int) -> Optional[AttendanceRecord]:
        """Parse a single row; returns None when the row should be skipped."""
        date_str = _cell(row, "Date")
        if not date_str:
            return None

        try:
            return AttendanceRecord(
                external_id=_cell(row, "Record ID"),
                worker_id=_cell(row, "Worker ID"),
                date=self._parse_date(date_str),
                start_time=parse_time(_cell(row, "Start Time")),
                end_time=parse_time(_cell(row, "End Time")),
                hours=parse_hours_logged(_cell(row, "Hours")),
                company=_cell(row, "Company") or None,
                status=_cell(row, "Status") or None,
                period_id=_cell(row, "Period") or None,
            )
        except (ValidationError, ValueError) as e:
            logger.warning("Skipping attendance row %d: %s", row_number, e)
            return None

    @staticmethod
    def _parse_date(date_str: str) -> dt.date:
        """Parse a date in ISO, European or US notation.

        Raises:
            ValueError: If no format matches
        """
        for fmt in DATE_FORMATS:
            try:
                return dt.datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Invalid date format: {date_str}")


class SheetsAttendanceProvider(AttendanceProvider):
    """Attendance provider backed by a spreadsheet export.

    The sheet is read once per provider instance and filtered per worker;
    call ``refresh`` to force a re-read.
    """

    def __init__(self, reader: AttendanceSheetReader, spreadsheet_id: str, range_name: str):
        self.reader = reader
        self.spreadsheet_id = spreadsheet_id
        self.range_name = range_name
        self._records: Optional[List[AttendanceRecord]] = None

    @classmethod
    def from_config(cls, config) -> "SheetsAttendanceProvider":
        reader = AttendanceSheetReader(GoogleSheetsService.from_config(config))
        return cls(reader, config.attendance_sheet_id, config.attendance_sheet_range)

    def refresh(self) -> None:
        self._records = None

    def _all_records(self) -> List[AttendanceRecord]:
        if self._records is None:
            self._records = self.reader.read_records(self.spreadsheet_id, self.range_name)
        return self._records

    def get_current_period(self) -> Optional[Dict[str, Any]]:
        """Latest period id present in the export, if the export has periods."""
        periods = sorted({r.period_id for r in self._all_records() if r.period_id})
        return {"id": periods[-1]} if periods else None

    def fetch_records(
        self, worker_id: str, period_id: Optional[str] = None
    ) -> List[AttendanceRecord]:
        return [
            record
            for record in self._all_records()
            if record.worker_id == worker_id
            and (period_id is None or record.period_id in (None, period_id))
        ]
