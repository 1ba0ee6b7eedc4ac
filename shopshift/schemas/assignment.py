"""Shift assignment Pydantic request/response schema definitions.

Covers manager assignment, worker join requests, approval/rejection,
copy-on-write edits, and the UI timing preview.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from shopshift.schemas.common import BreakPeriod, HourRange, PersonRef, ShiftRef


class AssignmentCreate(BaseModel):
    """Manager assigns a worker to a shift template on a date.

    Attributes:
        shift_template_id: Target template
        worker_id: Worker being assigned
        date: Shift date
        assigned_hours: Covered hour ranges (at least one)
        break_periods: Optional breaks
        assignment_notes: Optional notes
    """

    shift_template_id: UUID
    worker_id: UUID
    date: date
    assigned_hours: list[HourRange] = Field(..., min_length=1)
    break_periods: list[BreakPeriod] | None = None
    assignment_notes: str | None = None


class JoinShiftCreate(BaseModel):
    """Worker asks to join a shift template on a date.

    Attributes:
        shift_template_id: Target template
        date: Shift date
        requested_hours: Hour ranges; defaults to the template's full store hours
        request_notes: Optional notes
    """

    shift_template_id: UUID
    date: date
    requested_hours: list[HourRange] | None = None
    request_notes: str | None = None


class AssignmentEdit(BaseModel):
    """Edit an assignment. Creates a replacement row; the original is superseded.

    Attributes:
        requested_hours: New hour ranges; defaults to the original's hours
        request_notes: Notes for the replacement row
    """

    requested_hours: list[HourRange] | None = None
    request_notes: str | None = None


class AssignmentReject(BaseModel):
    """Rejection reason, appended to the assignment notes."""

    reason: str | None = None


class AssignmentResponse(BaseModel):
    """Shift assignment response schema with display references.

    resolution distinguishes rejected rows that were declined from rows
    superseded by an edit or switch ("active" for all other statuses).
    """

    id: str
    shift_template_id: str
    worker_id: str
    date: date
    assigned_hours: list[HourRange]
    break_periods: list[BreakPeriod] | None = None
    assigned_by_id: str | None = None
    assigned_at: datetime | None = None
    status: str
    resolution: str
    worker_approved_at: datetime | None = None
    manager_approved_at: datetime | None = None
    assignment_notes: str | None = None
    superseded_by_id: str | None = None
    worker: PersonRef | None = None
    shift: ShiftRef | None = None
    assigned_by: PersonRef | None = None


class TimingPreviewResponse(BaseModel):
    """Lead-time rules evaluated for a shift start, for UI previews."""

    date: date
    start_time: str
    hours_until: float
    auto_approve_manager_assignment: bool
    auto_approve_worker_request: bool
    can_worker_edit_assignment: bool
