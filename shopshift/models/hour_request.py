"""Worker hour request SQLAlchemy ORM model definition.

Worker-initiated requests (join a shift, switch with a colleague, extra
hours, time off, schedule change) reviewed by a manager. An approved
join request materialises into a shift assignment.

Tables:
    - hour_requests: Worker requests awaiting or past manager review
"""

import uuid
from datetime import date as calendar_date, datetime, timezone
from typing import Any
from sqlalchemy import JSON, String, DateTime, Date, Text, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base

# Request types
JOIN_SHIFT = "join_shift"
SWITCH_REQUEST = "switch_request"
EXTRA_HOURS = "extra_hours"
TIME_OFF = "time_off"
SCHEDULE_CHANGE = "schedule_change"

# Status values
PENDING = "pending"
APPROVED = "approved"
DENIED = "denied"
CANCELLED = "cancelled"


class HourRequest(Base):
    """Hour request model.

    Status Flow:
        pending → approved / denied / cancelled
        - switch_request: the target worker answers first; a denial ends the
          request as denied, an approval leaves it pending for the manager.

    Attributes:
        id: Unique identifier
        worker_id: Requesting worker
        shift_template_id: Template the request concerns
        date: Calendar date the request concerns
        request_type: join_shift / switch_request / extra_hours / time_off / schedule_change
        requested_hours: Single {start_time, end_time} range, optional
        switch_details: {requester_assignment_id, target_assignment_id,
            target_worker_id, target_worker_response} for switch requests
        reason: Worker's reason, optional
        priority: "low" / "normal" / "urgent"
        status: pending / approved / denied / cancelled
        reviewed_by: Reviewing manager
        reviewed_at: Review timestamp
        review_notes: Manager's notes
        created_assignment_id: Assignment created on approval, if any
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Constraints:
        uq_hour_requests_pending: At most one pending request per
            (worker_id, shift_template_id, date)
    """

    __tablename__ = "hour_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shift_template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shift_templates.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    request_type: Mapped[str] = mapped_column(String(30), nullable=False)
    requested_hours: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    switch_details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(10), default="normal")
    status: Mapped[str] = mapped_column(String(20), default=PENDING)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_assignment_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shift_assignments.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index(
            "uq_hour_requests_pending",
            "worker_id", "shift_template_id", "date",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_hour_requests_status", "status"),
        Index("ix_hour_requests_worker", "worker_id"),
    )
