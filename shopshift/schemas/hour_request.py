"""Hour request Pydantic request/response schema definitions."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from shopshift.schemas.common import HourRange, PersonRef, ShiftRef

Priority = Literal["low", "normal", "urgent"]
Decision = Literal["approved", "denied"]


class JoinShiftRequestCreate(BaseModel):
    """Worker asks a manager to add them to a shift.

    Attributes:
        shift_template_id: Target template
        date: Shift date
        requested_hours: Single hour range to work
        reason: Optional reason shown to the reviewer
        priority: low / normal / urgent
    """

    shift_template_id: UUID
    date: date
    requested_hours: HourRange
    reason: str | None = None
    priority: Priority = "normal"


class SwitchRequestCreate(BaseModel):
    """Worker proposes swapping one of their assignments with a colleague's.

    Attributes:
        assignment_id: Requester's own assignment
        target_assignment_id: Colleague's assignment to take over
        reason: Optional reason
        priority: low / normal / urgent
    """

    assignment_id: UUID
    target_assignment_id: UUID
    reason: str | None = None
    priority: Priority = "normal"


class HourRequestCreate(BaseModel):
    """Other worker requests (no automatic assignment side effect)."""

    request_type: Literal["extra_hours", "time_off", "schedule_change"]
    shift_template_id: UUID
    date: date
    requested_hours: HourRange | None = None
    reason: str | None = None
    priority: Priority = "normal"


class RequestReview(BaseModel):
    """Manager's decision on a pending request."""

    decision: Decision
    review_notes: str | None = None


class SwitchResponse(BaseModel):
    """Target worker's answer to a switch request."""

    response: Decision


class SwitchDetails(BaseModel):
    requester_assignment_id: str
    target_assignment_id: str
    target_worker_id: str
    target_worker_response: Decision | None = None


class HourRequestResponse(BaseModel):
    """Hour request response schema with display references."""

    id: str
    worker_id: str
    shift_template_id: str
    date: date
    request_type: str
    requested_hours: HourRange | None = None
    switch_details: SwitchDetails | None = None
    reason: str | None = None
    priority: str
    status: str
    reviewed_by_id: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    created_assignment_id: str | None = None
    created_at: datetime | None = None
    worker: PersonRef | None = None
    shift: ShiftRef | None = None
    target_worker: PersonRef | None = None
    reviewed_by: PersonRef | None = None
