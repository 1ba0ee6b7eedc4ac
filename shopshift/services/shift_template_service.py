"""Shift Template Service: template management and hour-bound checks.

Templates define the store hours window every assignment must fit in.
The bound check lives here so that manager assignment, worker joins,
edits and hour requests all apply the same rule.
"""

from datetime import date, time
from typing import Any, Iterable, Mapping, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.shift_template import ShiftTemplate
from shopshift.repositories.shift_template_repository import shift_template_repository
from shopshift.schemas.shift_template import HourlyRequirement, ShiftTemplateCreate, ShiftTemplateUpdate
from shopshift.services.permission_service import Actor, require_manager
from shopshift.utils.exceptions import BadRequestError, NotFoundError
from shopshift.utils.shift_time import format_clock, parse_clock

WEEKDAYS: tuple[str, ...] = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class ShiftTemplateService:
    """Shift template service."""

    @staticmethod
    def validate_hours(
        template: ShiftTemplate,
        hour_ranges: Iterable[Mapping[str, Any]],
    ) -> None:
        """Check that every range is well formed and inside the template's store hours.

        Args:
            template: Template whose open/close window bounds the ranges
            hour_ranges: {start_time, end_time} "HH:MM" ranges

        Raises:
            BadRequestError: When a range has start >= end or leaves the window
        """
        for hour_range in hour_ranges:
            start: time = parse_clock(hour_range["start_time"])
            end: time = parse_clock(hour_range["end_time"])
            if start >= end:
                raise BadRequestError("Invalid hour range: start time must be before end time")
            if start < template.open_time or end > template.close_time:
                raise BadRequestError(
                    f"Requested hours must be within shift hours "
                    f"({format_clock(template.open_time)} - {format_clock(template.close_time)})"
                )

    @staticmethod
    def _validate_requirements(
        open_time: time,
        close_time: time,
        requirements: Sequence[HourlyRequirement],
    ) -> None:
        """Validate hourly staffing requirements against the store hours.

        Raises:
            BadRequestError: On empty list, bad worker counts, malformed,
                out-of-bounds or overlapping ranges
        """
        if open_time >= close_time:
            raise BadRequestError("Opening time must be before closing time")
        if not requirements:
            raise BadRequestError("At least one hourly requirement is required")

        ranges: list[tuple[time, time]] = []
        for req in requirements:
            if req.min_workers < 0:
                raise BadRequestError("Minimum workers cannot be negative")
            if req.optimal_workers < req.min_workers:
                raise BadRequestError("Optimal workers must be greater than or equal to minimum workers")

            start: time = parse_clock(req.start_time)
            end: time = parse_clock(req.end_time)
            if start >= end:
                raise BadRequestError(f"Invalid requirement range {req.start_time} - {req.end_time}")
            if start < open_time or end > close_time:
                raise BadRequestError(
                    f"Requirement {req.start_time} - {req.end_time} is outside shift hours "
                    f"({format_clock(open_time)} - {format_clock(close_time)})"
                )
            ranges.append((start, end))

        # Sorted by start, any overlap shows up between neighbours
        ranges.sort()
        for (_, prev_end), (next_start, _) in zip(ranges, ranges[1:]):
            if next_start < prev_end:
                raise BadRequestError("Hourly requirements must not overlap")

    async def get_template(self, db: AsyncSession, template_id: UUID) -> ShiftTemplate:
        """Fetch a template by id.

        Raises:
            NotFoundError: When the template does not exist
        """
        template: ShiftTemplate | None = await shift_template_repository.get_by_id(db, template_id)
        if template is None:
            raise NotFoundError("Shift template not found")
        return template

    async def get_active_template(self, db: AsyncSession, template_id: UUID) -> ShiftTemplate:
        """Fetch a template that can accept new assignments.

        Raises:
            NotFoundError: When the template does not exist
            BadRequestError: When the template is inactive
        """
        template: ShiftTemplate = await self.get_template(db, template_id)
        if not template.is_active:
            raise BadRequestError("Shift template is not active")
        return template

    async def list_active_templates(self, db: AsyncSession) -> Sequence[ShiftTemplate]:
        return await shift_template_repository.get_active(db)

    async def get_templates_for_date(self, db: AsyncSession, shift_date: date) -> list[ShiftTemplate]:
        """Active templates that recur on the given date's weekday."""
        weekday: str = WEEKDAYS[shift_date.weekday()]
        templates = await shift_template_repository.get_active(db)
        return [t for t in templates if weekday in (t.recurring_days or [])]

    async def create_template(
        self,
        db: AsyncSession,
        actor: Actor,
        data: ShiftTemplateCreate,
    ) -> ShiftTemplate:
        """Create a shift template (managers only).

        Args:
            db: Async database session
            actor: Authenticated caller
            data: Template creation data

        Returns:
            ShiftTemplate: The created template

        Raises:
            ForbiddenError: When the caller is not a manager
            BadRequestError: When hours or requirements are invalid
        """
        require_manager(actor)

        open_time: time = parse_clock(data.open_time)
        close_time: time = parse_clock(data.close_time)
        self._validate_requirements(open_time, close_time, data.hourly_requirements)

        return await shift_template_repository.create(
            db,
            {
                "name": data.name,
                "description": data.description,
                "type": data.type,
                "open_time": open_time,
                "close_time": close_time,
                "hourly_requirements": [r.model_dump() for r in data.hourly_requirements],
                "recurring_days": list(data.recurring_days),
                "color": data.color,
                "is_active": True,
                "created_by": actor.id,
            },
        )

    async def update_template(
        self,
        db: AsyncSession,
        actor: Actor,
        template_id: UUID,
        data: ShiftTemplateUpdate,
    ) -> ShiftTemplate:
        """Update a shift template (managers only, partial update).

        Requirements are re-validated against the resulting store hours
        whenever either changes. Existing assignments are left untouched.

        Raises:
            ForbiddenError: When the caller is not a manager
            NotFoundError: When the template does not exist
            BadRequestError: When hours or requirements are invalid
        """
        require_manager(actor)
        template: ShiftTemplate = await self.get_template(db, template_id)

        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        if update_data.get("open_time") is not None:
            update_data["open_time"] = parse_clock(update_data["open_time"])
        if update_data.get("close_time") is not None:
            update_data["close_time"] = parse_clock(update_data["close_time"])

        if {"open_time", "close_time", "hourly_requirements"} & update_data.keys():
            requirements: list[HourlyRequirement] = (
                data.hourly_requirements
                if data.hourly_requirements is not None
                else [HourlyRequirement(**r) for r in template.hourly_requirements or []]
            )
            self._validate_requirements(
                update_data.get("open_time") or template.open_time,
                update_data.get("close_time") or template.close_time,
                requirements,
            )

        for field, value in update_data.items():
            if value is None and field not in ("description", "color"):
                continue
            setattr(template, field, value)

        await db.flush()
        await db.refresh(template)
        return template

    async def delete_template(
        self,
        db: AsyncSession,
        actor: Actor,
        template_id: UUID,
    ) -> dict[str, bool]:
        """Delete a template, or deactivate it when assignments reference it.

        Returns:
            dict: {"deleted": bool, "deactivated": bool}

        Raises:
            ForbiddenError: When the caller is not a manager
            NotFoundError: When the template does not exist
        """
        require_manager(actor)
        template: ShiftTemplate = await self.get_template(db, template_id)

        if await shift_template_repository.count_assignments(db, template.id) > 0:
            template.is_active = False
            await db.flush()
            return {"deleted": False, "deactivated": True}

        await shift_template_repository.delete(db, template)
        return {"deleted": True, "deactivated": False}

    def build_response(self, template: ShiftTemplate) -> dict:
        return {
            "id": str(template.id),
            "name": template.name,
            "description": template.description,
            "type": template.type,
            "open_time": format_clock(template.open_time),
            "close_time": format_clock(template.close_time),
            "hourly_requirements": template.hourly_requirements or [],
            "recurring_days": template.recurring_days or [],
            "is_active": template.is_active,
            "color": template.color,
            "created_by": str(template.created_by) if template.created_by else None,
        }


# Singleton instance
shift_template_service: ShiftTemplateService = ShiftTemplateService()
