"""Shift template Pydantic request/response schema definitions."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from shopshift.schemas.common import HourRange, normalize_clock

TemplateType = Literal["operational", "maintenance", "educational", "special"]
Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class HourlyRequirement(HourRange):
    """Staffing requirement for an hour range.

    Attributes:
        min_workers: Minimum workers needed
        optimal_workers: Target workers
        notes: Optional notes
    """

    min_workers: int
    optimal_workers: int
    notes: str | None = None


class ShiftTemplateCreate(BaseModel):
    """Shift template creation request schema (managers only)."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    type: TemplateType = "operational"
    open_time: str
    close_time: str
    hourly_requirements: list[HourlyRequirement]
    recurring_days: list[Weekday]
    color: str | None = None

    @field_validator("open_time", "close_time")
    @classmethod
    def _normalize_clock(cls, value: str) -> str:
        return normalize_clock(value)


class ShiftTemplateUpdate(BaseModel):
    """Shift template update request schema (partial update)."""

    name: str | None = None
    description: str | None = None
    type: TemplateType | None = None
    open_time: str | None = None
    close_time: str | None = None
    hourly_requirements: list[HourlyRequirement] | None = None
    recurring_days: list[Weekday] | None = None
    color: str | None = None
    is_active: bool | None = None

    @field_validator("open_time", "close_time")
    @classmethod
    def _normalize_clock(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_clock(value)


class ShiftTemplateResponse(BaseModel):
    """Shift template response schema."""

    id: str
    name: str
    description: str | None
    type: str
    open_time: str
    close_time: str
    hourly_requirements: list[HourlyRequirement]
    recurring_days: list[str]
    is_active: bool
    color: str | None
    created_by: str | None


class ShiftTemplateDeleteResponse(BaseModel):
    """Outcome of a delete: templates referenced by assignments are only deactivated."""

    deleted: bool
    deactivated: bool
