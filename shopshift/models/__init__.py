"""SQLAlchemy ORM models package: Central import point for all domain models.

Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: Users with staff flag and capability tags
    shift_template: Recurring shift templates with store hours and staffing requirements
    assignment: Date-scoped shift assignments with dual-party approval
    hour_request: Worker-initiated hour requests (join, switch, extra hours, time off)
"""

from shopshift.models.user import User
from shopshift.models.shift_template import ShiftTemplate
from shopshift.models.assignment import ShiftAssignment
from shopshift.models.hour_request import HourRequest

__all__ = [
    "User",
    "ShiftTemplate",
    "ShiftAssignment",
    "HourRequest",
]
