"""Shift assignment SQLAlchemy ORM model definition.

A shift assignment places one worker on one shift template for one date.
Rows are never deleted: rejection and edits keep the original row as
history (edits create a new row and mark the original as superseded).

Tables:
    - shift_assignments: Date-scoped worker assignments with dual-party approval
"""

import uuid
from datetime import date as calendar_date, datetime, timezone
from typing import Any
from sqlalchemy import JSON, String, DateTime, Date, Text, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base

# Status values
PENDING_WORKER_APPROVAL = "pending_worker_approval"
PENDING_MANAGER_APPROVAL = "pending_manager_approval"
CONFIRMED = "confirmed"
REJECTED = "rejected"
COMPLETED = "completed"

PENDING_STATUSES: tuple[str, ...] = (PENDING_WORKER_APPROVAL, PENDING_MANAGER_APPROVAL)
TERMINAL_STATUSES: tuple[str, ...] = (REJECTED, COMPLETED)


class ShiftAssignment(Base):
    """Shift assignment model.

    Status Flow:
        pending_worker_approval ─┐
                                 ├→ confirmed → completed
        pending_manager_approval ┘
        pending_* → rejected
        any non-terminal → rejected (superseded by edit, superseded_by_id set)

    Attributes:
        id: Unique identifier
        shift_template_id: Template this assignment instantiates
        worker_id: Assigned worker
        date: Calendar date the assignment covers
        assigned_hours: Ordered list of {start_time, end_time} ("HH:MM") ranges
        break_periods: Optional list of {start_time, end_time, is_paid}
        assigned_by: User who created (or last edited) the assignment
        assigned_at: When that happened
        status: See status flow above
        worker_approved_at: When the worker accepted
        manager_approved_at: When a manager accepted
        assignment_notes: Append-only audit notes
        superseded_by_id: Replacement assignment when this row was edited away
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Constraints:
        uq_shift_assignments_active: At most one non-rejected row per
            (worker_id, shift_template_id, date)
    """

    __tablename__ = "shift_assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shift_templates.id", ondelete="CASCADE"), nullable=False)
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    assigned_hours: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    break_periods: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    assigned_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    worker_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    manager_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assignment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    superseded_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shift_assignments.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index(
            "uq_shift_assignments_active",
            "worker_id", "shift_template_id", "date",
            unique=True,
            postgresql_where=text("status <> 'rejected'"),
            sqlite_where=text("status <> 'rejected'"),
        ),
        Index("ix_shift_assignments_date", "date"),
        Index("ix_shift_assignments_worker_date", "worker_id", "date"),
        Index("ix_shift_assignments_template_date", "shift_template_id", "date"),
    )

    @property
    def resolution(self) -> str:
        """Disambiguate rejected rows: "declined" vs "superseded" (else "active")."""
        if self.status != REJECTED:
            return "active"
        return "superseded" if self.superseded_by_id is not None else "declined"
