"""Readers turning spreadsheet exports into attendance records."""

from timekeeper.readers.attendance_sheet_reader import (
    AttendanceSheetReader,
    SheetsAttendanceProvider,
)

__all__ = ["AttendanceSheetReader", "SheetsAttendanceProvider"]
