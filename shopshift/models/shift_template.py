"""Shift template SQLAlchemy ORM model definition.

A shift template describes a recurring operational population: the store
hours it covers, how many workers each hour range needs, and the weekdays
it runs on. Assignments are date-scoped instances of a template.

Tables:
    - shift_templates: Recurring shift definitions
"""

import uuid
from datetime import datetime, time, timezone
from typing import Any
from sqlalchemy import JSON, String, DateTime, Time, Text, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shopshift.database import Base


class ShiftTemplate(Base):
    """Shift template model.

    Attributes:
        id: Unique identifier
        name: Display name (e.g. "Morning Floor")
        description: Optional description
        type: "operational" / "maintenance" / "educational" / "special"
        open_time: Store opening time for this template
        close_time: Store closing time for this template
        hourly_requirements: List of {start_time, end_time, min_workers, optimal_workers, notes}
        recurring_days: Weekday names the template runs on ("monday" ... "sunday")
        is_active: Inactive templates accept no new assignments
        color: Calendar hex color, optional
        created_by: Manager who created the template
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "shift_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), default="operational")
    # Store hours window; assigned hours must fall inside it
    open_time: Mapped[time] = mapped_column(Time, nullable=False)
    close_time: Mapped[time] = mapped_column(Time, nullable=False)
    hourly_requirements: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    recurring_days: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_shift_templates_is_active", "is_active"),
    )
