"""Timekeeper: timesheet integrity engine.

Validates time entries, drives the weekly timesheet approval lifecycle and
reconciles attendance records imported from an external provider.
"""

__version__ = "1.0.0"
