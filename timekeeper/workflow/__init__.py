"""Timesheet lifecycle and status-gated entry editing."""

from timekeeper.workflow.entry_service import EntryService
from timekeeper.workflow.state_machine import TRANSITIONS, TimesheetStateMachine

__all__ = ["EntryService", "TimesheetStateMachine", "TRANSITIONS"]
