"""Unit tests for the spreadsheet attendance export."""

import datetime as dt
from unittest.mock import Mock

import pandas as pd
import pytest

from timekeeper.readers.attendance_sheet_reader import (
    AttendanceSheetReader,
    SheetsAttendanceProvider,
)


def _row(record_id, worker_id="W1", date="2024-01-15", **fields):
    row = {
        "Record ID": record_id,
        "Worker ID": worker_id,
        "Date": date,
        "Start Time": "09:00",
        "End Time": "12:00",
        "Hours": "",
        "Company": "Acme",
        "Status": "approved",
        "Period": "P1",
    }
    row.update(fields)
    return row


class TestAttendanceSheetReader:
    """Test AttendanceSheetReader functionality."""

    @pytest.fixture
    def mock_sheets_service(self):
        """Create a mock Google Sheets service."""
        return Mock()

    @pytest.fixture
    def reader(self, mock_sheets_service):
        return AttendanceSheetReader(mock_sheets_service)

    def test_read_records(self, reader, mock_sheets_service):
        """Test rows are parsed into records."""
        mock_sheets_service.read_sheet.return_value = pd.DataFrame(
            [
                _row("1"),
                _row("2", date="16.01.2024", **{"Start Time": "", "End Time": "", "Hours": "7:30"}),
            ]
        )

        records = reader.read_records("sheet-id", "Attendance")

        assert [r.external_id for r in records] == ["1", "2"]
        assert records[0].start_time == dt.time(9, 0)
        assert records[0].status == "approved"
        assert records[1].date == dt.date(2024, 1, 16)
        assert records[1].hours == 7.5
        assert records[1].start_time is None

    def test_bad_rows_skipped(self, reader, mock_sheets_service):
        """Test rows with missing ids or unparseable dates are skipped."""
        mock_sheets_service.read_sheet.return_value = pd.DataFrame(
            [_row("1"), _row("", worker_id="W1"), _row("3", date="someday"), _row("4", date="")]
        )

        records = reader.read_records("sheet-id", "Attendance")

        assert [r.external_id for r in records] == ["1"]

    def test_us_date_format(self, reader):
        """Test MM/DD/YYYY dates are accepted."""
        assert reader._parse_date("01/15/2024") == dt.date(2024, 1, 15)

    def test_empty_sheet(self, reader, mock_sheets_service):
        """Test an empty export yields no records."""
        mock_sheets_service.read_sheet.return_value = pd.DataFrame()

        assert reader.read_records("sheet-id", "Attendance") == []


class TestSheetsAttendanceProvider:
    """Test the spreadsheet-backed provider."""

    @pytest.fixture
    def provider(self):
        mock_sheets_service = Mock()
        mock_sheets_service.read_sheet.return_value = pd.DataFrame(
            [
                _row("1", worker_id="W1", Period="P1"),
                _row("2", worker_id="W1", Period="P2"),
                _row("3", worker_id="W2", Period=""),
            ]
        )
        return SheetsAttendanceProvider(
            AttendanceSheetReader(mock_sheets_service), "sheet-id", "Attendance"
        )

    def test_current_period_is_latest(self, provider):
        """Test the latest period in the export is current."""
        assert provider.get_current_period() == {"id": "P2"}

    def test_fetch_records_filters_worker_and_period(self, provider):
        """Test records are filtered by worker and period."""
        assert [r.external_id for r in provider.fetch_records("W1", "P2")] == ["2"]
        assert [r.external_id for r in provider.fetch_records("W1")] == ["1", "2"]
        assert [r.external_id for r in provider.fetch_records("W2", "P2")] == ["3"]

    def test_sheet_read_once(self, provider):
        """Test the export is cached until refresh."""
        provider.fetch_records("W1")
        provider.fetch_records("W2")
        provider.refresh()
        provider.fetch_records("W1")

        assert provider.reader.sheets_service.read_sheet.call_count == 2
