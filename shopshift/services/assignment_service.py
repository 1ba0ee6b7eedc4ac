"""Shift Assignment Service: the assignment approval workflow.

Every operation checks, in order: capability, referenced records,
domain validity (hours, duplicates), then performs the transition.
Routers commit after the service returns, so a failed guard never
leaves a partial write.

Status transitions:
    manager assigns      -> confirmed (self) / pending_worker_approval
    worker joins         -> confirmed (manager or far enough out) / pending_manager_approval
    approve              -> confirmed
    reject               -> rejected (declined)
    complete             -> completed
    edit                 -> original rejected (superseded) + new row
"""

from datetime import date, datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.config import settings
from shopshift.models.assignment import (
    COMPLETED,
    CONFIRMED,
    PENDING_MANAGER_APPROVAL,
    PENDING_STATUSES,
    PENDING_WORKER_APPROVAL,
    REJECTED,
    TERMINAL_STATUSES,
    ShiftAssignment,
)
from shopshift.models.shift_template import ShiftTemplate
from shopshift.models.user import User
from shopshift.repositories.assignment_repository import assignment_repository
from shopshift.repositories.shift_template_repository import shift_template_repository
from shopshift.repositories.user_repository import user_repository
from shopshift.schemas.assignment import AssignmentCreate, AssignmentEdit, JoinShiftCreate
from shopshift.services.permission_service import (
    Actor,
    require_manager,
    require_worker,
    resolve_capabilities,
)
from shopshift.services.shift_template_service import shift_template_service
from shopshift.utils.exceptions import (
    BadRequestError,
    ConflictError,
    DuplicateError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from shopshift.utils.shift_time import (
    auto_approve_manager_assignment,
    auto_approve_worker_request,
    can_worker_edit_assignment,
    earliest_start,
    format_clock,
    hours_until,
    parse_clock,
    utc_now,
)

ALREADY_ASSIGNED: str = "Worker is already assigned to this shift on this date"


def append_note(existing: str | None, line: str) -> str:
    """Append a line to audit notes without overwriting earlier entries."""
    if not existing:
        return line
    return f"{existing}\n{line}"


class AssignmentService:
    """Shift assignment service."""

    # --- Reads ---------------------------------------------------------------

    async def get_assignment(
        self,
        db: AsyncSession,
        actor: Actor,
        assignment_id: UUID,
    ) -> ShiftAssignment:
        """Fetch one assignment, including rejected history rows.

        Visible to the assigned worker and to managers.

        Raises:
            NotFoundError: When the assignment does not exist
            ForbiddenError: When the caller is neither the worker nor a manager
        """
        assignment: ShiftAssignment = await self._get_or_404(db, assignment_id)
        if assignment.worker_id != actor.id and not actor.is_manager:
            raise ForbiddenError("You cannot view this assignment")
        return assignment

    async def get_assignments_for_date(
        self,
        db: AsyncSession,
        shift_date: date,
    ) -> Sequence[ShiftAssignment]:
        return await assignment_repository.get_for_date(db, shift_date)

    async def get_assignments_for_worker(
        self,
        db: AsyncSession,
        worker_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Sequence[ShiftAssignment]:
        if start_date is not None and end_date is not None and start_date > end_date:
            raise BadRequestError("start_date must not be after end_date")
        return await assignment_repository.get_for_worker(db, worker_id, start_date, end_date)

    async def get_pending_assignments(
        self,
        db: AsyncSession,
        actor: Actor,
    ) -> Sequence[ShiftAssignment]:
        """Pending assignments relevant to the caller.

        Managers see every pending assignment, workers only the ones
        waiting on their own approval, everyone else nothing.
        """
        if actor.is_manager:
            return await assignment_repository.get_pending(db)
        if actor.is_worker:
            return await assignment_repository.get_pending(db, worker_id=actor.id)
        return []

    def preview_timing(self, shift_date: date, start_time: str) -> dict:
        """Evaluate the lead-time rules for a prospective shift start."""
        return {
            "date": shift_date,
            "start_time": format_clock(parse_clock(start_time)),
            "hours_until": round(hours_until(shift_date, start_time), 2),
            "auto_approve_manager_assignment": auto_approve_manager_assignment(shift_date, start_time),
            "auto_approve_worker_request": auto_approve_worker_request(shift_date, start_time),
            "can_worker_edit_assignment": can_worker_edit_assignment(shift_date, start_time),
        }

    # --- Mutations -----------------------------------------------------------

    async def assign_worker_to_shift(
        self,
        db: AsyncSession,
        actor: Actor,
        data: AssignmentCreate,
    ) -> ShiftAssignment:
        """Manager places a worker on a shift.

        The assignment is confirmed immediately only when managers assign
        themselves; any other worker must still sign off, however far away
        the shift is. The manager's approval is recorded either way.

        Args:
            db: Async database session
            actor: Authenticated caller
            data: Assignment creation data

        Returns:
            ShiftAssignment: The created assignment

        Raises:
            ForbiddenError: When the caller is not a manager
            NotFoundError: When the worker or template does not exist
            BadRequestError: When the target is not a worker, the template
                is inactive, or the hours are invalid
            DuplicateError: When the worker already holds this shift on this date
        """
        require_manager(actor)

        worker: User | None = await user_repository.get_by_id(db, data.worker_id)
        if worker is None:
            raise NotFoundError("Worker not found")
        if not resolve_capabilities(worker).is_worker:
            raise BadRequestError("Target user is not a worker")

        template: ShiftTemplate = await shift_template_service.get_active_template(db, data.shift_template_id)
        hours: list[dict[str, Any]] = [h.model_dump() for h in data.assigned_hours]
        shift_template_service.validate_hours(template, hours)

        if await assignment_repository.find_active(db, worker.id, template.id, data.date) is not None:
            raise DuplicateError(ALREADY_ASSIGNED)

        is_self: bool = worker.id == actor.id
        now: datetime = utc_now()
        return await assignment_repository.create(
            db,
            {
                "shift_template_id": template.id,
                "worker_id": worker.id,
                "date": data.date,
                "assigned_hours": hours,
                "break_periods": [b.model_dump() for b in data.break_periods] if data.break_periods else None,
                "assigned_by": actor.id,
                "assigned_at": now,
                "status": CONFIRMED if is_self else PENDING_WORKER_APPROVAL,
                "worker_approved_at": now if is_self else None,
                "manager_approved_at": now,
                "assignment_notes": data.assignment_notes,
            },
            duplicate_detail=ALREADY_ASSIGNED,
        )

    async def request_join_shift(
        self,
        db: AsyncSession,
        actor: Actor,
        data: JoinShiftCreate,
    ) -> ShiftAssignment:
        """Worker adds themselves to a shift.

        Confirmed immediately when the requester is a manager or the shift
        starts beyond the worker auto-approve window; otherwise it waits for
        a manager with the worker's approval already recorded.

        Raises:
            ForbiddenError: When the caller is not a worker
            NotFoundError: When the template does not exist
            BadRequestError: When the template is inactive or hours are invalid
            DuplicateError: When the caller already holds this shift on this date
        """
        require_worker(actor)

        template: ShiftTemplate = await shift_template_service.get_active_template(db, data.shift_template_id)
        if data.requested_hours:
            hours: list[dict[str, Any]] = [h.model_dump() for h in data.requested_hours]
        else:
            hours = [{
                "start_time": format_clock(template.open_time),
                "end_time": format_clock(template.close_time),
            }]
        shift_template_service.validate_hours(template, hours)

        if await assignment_repository.find_active(db, actor.id, template.id, data.date) is not None:
            raise DuplicateError("You are already assigned to this shift on this date")

        now: datetime = utc_now()
        confirmed: bool = actor.is_manager or auto_approve_worker_request(data.date, earliest_start(hours))
        return await assignment_repository.create(
            db,
            {
                "shift_template_id": template.id,
                "worker_id": actor.id,
                "date": data.date,
                "assigned_hours": hours,
                "assigned_by": actor.id,
                "assigned_at": now,
                "status": CONFIRMED if confirmed else PENDING_MANAGER_APPROVAL,
                "worker_approved_at": now,
                "manager_approved_at": now if confirmed else None,
                "assignment_notes": data.request_notes,
            },
            duplicate_detail="You are already assigned to this shift on this date",
        )

    async def approve_assignment(
        self,
        db: AsyncSession,
        actor: Actor,
        assignment_id: UUID,
    ) -> ShiftAssignment:
        """Approve an assignment waiting on the caller.

        pending_worker_approval is approved by the assigned worker,
        pending_manager_approval by any manager. Only the matching
        timestamp is written.

        Raises:
            ForbiddenError: When the caller is not a worker
            NotFoundError: When the assignment does not exist
            ConflictError: When the assignment is not pending the caller's approval
        """
        require_worker(actor)
        assignment: ShiftAssignment = await self._get_or_404(db, assignment_id)

        if assignment.status == PENDING_WORKER_APPROVAL and assignment.worker_id == actor.id:
            assignment.worker_approved_at = utc_now()
        elif assignment.status == PENDING_MANAGER_APPROVAL and actor.is_manager:
            assignment.manager_approved_at = utc_now()
        else:
            raise ConflictError("Assignment is not pending your approval")

        assignment.status = CONFIRMED
        await db.flush()
        return assignment

    async def reject_assignment(
        self,
        db: AsyncSession,
        actor: Actor,
        assignment_id: UUID,
        reason: str | None = None,
    ) -> ShiftAssignment:
        """Decline a pending assignment. The row is kept with the reason in its notes.

        Raises:
            ForbiddenError: When the caller is neither the assigned worker nor a manager
            NotFoundError: When the assignment does not exist
            ConflictError: When the assignment is not pending
        """
        require_worker(actor)
        assignment: ShiftAssignment = await self._get_or_404(db, assignment_id)

        if assignment.worker_id != actor.id and not actor.is_manager:
            raise ForbiddenError("Only the assigned worker or a manager can reject this assignment")
        if assignment.status not in PENDING_STATUSES:
            raise ConflictError("Only pending assignments can be rejected")

        assignment.status = REJECTED
        assignment.assignment_notes = append_note(
            assignment.assignment_notes, f"Rejected: {reason or 'No reason provided'}"
        )
        await db.flush()
        return assignment

    async def complete_assignment(
        self,
        db: AsyncSession,
        actor: Actor,
        assignment_id: UUID,
    ) -> ShiftAssignment:
        """Mark a confirmed assignment as worked (managers only).

        Raises:
            ForbiddenError: When the caller is not a manager
            NotFoundError: When the assignment does not exist
            ConflictError: When the assignment is not confirmed or has not started
        """
        require_manager(actor)
        assignment: ShiftAssignment = await self._get_or_404(db, assignment_id)

        if assignment.status != CONFIRMED:
            raise ConflictError("Only confirmed assignments can be completed")
        if hours_until(assignment.date, earliest_start(assignment.assigned_hours)) > 0:
            raise ConflictError("Shift has not started yet")

        assignment.status = COMPLETED
        await db.flush()
        return assignment

    async def edit_assignment(
        self,
        db: AsyncSession,
        actor: Actor,
        assignment_id: UUID,
        data: AssignmentEdit,
    ) -> ShiftAssignment:
        """Edit an assignment copy-on-write.

        The original row is rejected and points at its replacement; the
        replacement's status depends on who edited:

            manager, own assignment      -> confirmed
            manager, someone else's      -> pending_worker_approval
            worker, own assignment       -> pending_manager_approval

        Workers without manager capability can only edit while the shift
        is outside the edit window.

        Args:
            db: Async database session
            actor: Authenticated caller
            assignment_id: Assignment to replace
            data: New hours and notes (hours default to the original's)

        Returns:
            ShiftAssignment: The replacement assignment

        Raises:
            ForbiddenError: Caller is not the worker or a manager, or the edit
                window has closed
            NotFoundError: When the assignment does not exist
            ConflictError: When the original was already replaced or closed
            BadRequestError: When the template is inactive or hours are invalid
            InvalidStateError: For an editor combination the guards should exclude
        """
        require_worker(actor)
        original: ShiftAssignment = await self._get_or_404(db, assignment_id)

        is_own: bool = original.worker_id == actor.id
        if not is_own and not actor.is_manager:
            raise ForbiddenError("Only the assigned worker or a manager can edit this assignment")
        if not actor.is_manager and not can_worker_edit_assignment(
            original.date, earliest_start(original.assigned_hours)
        ):
            raise ForbiddenError(
                f"Assignments can only be edited more than "
                f"{settings.WORKER_EDIT_WINDOW_HOURS} hours before the shift starts"
            )
        if original.status in TERMINAL_STATUSES:
            raise ConflictError("Assignment has already been replaced or closed")

        template: ShiftTemplate = await shift_template_service.get_active_template(db, original.shift_template_id)
        if data.requested_hours:
            hours: list[dict[str, Any]] = [h.model_dump() for h in data.requested_hours]
        else:
            hours = list(original.assigned_hours)
        shift_template_service.validate_hours(template, hours)

        now: datetime = utc_now()
        if actor.is_manager and is_own:
            status, worker_approved_at, manager_approved_at = CONFIRMED, now, now
        elif actor.is_manager:
            status, worker_approved_at, manager_approved_at = PENDING_WORKER_APPROVAL, None, now
        elif is_own:
            status, worker_approved_at, manager_approved_at = PENDING_MANAGER_APPROVAL, now, None
        else:
            raise InvalidStateError("Invalid edit permissions")

        replacement: ShiftAssignment = await self.supersede(
            db,
            original,
            {
                "shift_template_id": original.shift_template_id,
                "worker_id": original.worker_id,
                "date": original.date,
                "assigned_hours": hours,
                "break_periods": original.break_periods,
                "assigned_by": actor.id,
                "assigned_at": now,
                "status": status,
                "worker_approved_at": worker_approved_at,
                "manager_approved_at": manager_approved_at,
                "assignment_notes": data.request_notes or f"Edited from original assignment: {original.id}",
            },
            note_prefix="Replaced by edit request",
        )
        return replacement

    async def supersede(
        self,
        db: AsyncSession,
        original: ShiftAssignment,
        replacement_data: dict[str, Any],
        note_prefix: str,
    ) -> ShiftAssignment:
        """Replace an assignment with a new row, keeping the original as history.

        The original is rejected first so the active-row unique index
        admits the replacement for the same (worker, template, date).

        Args:
            db: Async database session
            original: Row being replaced
            replacement_data: Column values of the new row
            note_prefix: Audit note written on the original, followed by the new id

        Returns:
            ShiftAssignment: The new row
        """
        original.status = REJECTED
        await db.flush()

        replacement: ShiftAssignment = await assignment_repository.create(
            db, replacement_data, duplicate_detail=ALREADY_ASSIGNED
        )

        original.superseded_by_id = replacement.id
        original.assignment_notes = append_note(
            original.assignment_notes, f"{note_prefix}: {replacement.id}"
        )
        await db.flush()
        return replacement

    async def swap_workers(
        self,
        db: AsyncSession,
        actor: Actor,
        first: ShiftAssignment,
        second: ShiftAssignment,
        note: str,
    ) -> tuple[ShiftAssignment, ShiftAssignment]:
        """Exchange the workers of two confirmed assignments copy-on-write.

        Both originals are rejected and superseded by confirmed rows for
        the same shift slots with the workers exchanged.

        Args:
            db: Async database session
            actor: Manager approving the swap
            first: Assignment of the first worker
            second: Assignment of the second worker
            note: Audit note for the new rows

        Returns:
            tuple: (first worker's new row on second's slot,
                    second worker's new row on first's slot)

        Raises:
            ConflictError: When either assignment is no longer confirmed
        """
        if first.status != CONFIRMED or second.status != CONFIRMED:
            raise ConflictError("Switched assignments are no longer active")

        now: datetime = utc_now()

        def slot(source: ShiftAssignment, worker_id: UUID) -> dict[str, Any]:
            return {
                "shift_template_id": source.shift_template_id,
                "worker_id": worker_id,
                "date": source.date,
                "assigned_hours": source.assigned_hours,
                "break_periods": source.break_periods,
                "assigned_by": actor.id,
                "assigned_at": now,
                "status": CONFIRMED,
                "worker_approved_at": now,
                "manager_approved_at": now,
                "assignment_notes": note,
            }

        # Both originals leave the active index before either new row is inserted
        first.status = REJECTED
        second.status = REJECTED
        await db.flush()

        first_moved: ShiftAssignment = await assignment_repository.create(
            db, slot(second, first.worker_id), duplicate_detail=ALREADY_ASSIGNED
        )
        second_moved: ShiftAssignment = await assignment_repository.create(
            db, slot(first, second.worker_id), duplicate_detail=ALREADY_ASSIGNED
        )

        for original, replacement in ((first, second_moved), (second, first_moved)):
            original.superseded_by_id = replacement.id
            original.assignment_notes = append_note(
                original.assignment_notes, f"Replaced by switch: {replacement.id}"
            )
        await db.flush()
        return first_moved, second_moved

    # --- Helpers -------------------------------------------------------------

    async def _get_or_404(self, db: AsyncSession, assignment_id: UUID) -> ShiftAssignment:
        assignment: ShiftAssignment | None = await assignment_repository.get_by_id(db, assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        return assignment

    async def build_responses(
        self,
        db: AsyncSession,
        assignments: Sequence[ShiftAssignment],
    ) -> list[dict]:
        """Build response dicts with worker, shift and assigner references.

        References to records that no longer exist are rendered as None
        rather than failing the listing.

        Args:
            db: Async database session
            assignments: Assignment ORM objects

        Returns:
            list[dict]: Response dicts in the input order
        """
        user_ids: set[UUID] = {a.worker_id for a in assignments}
        user_ids |= {a.assigned_by for a in assignments if a.assigned_by is not None}
        users: dict[UUID, User] = await user_repository.get_many(db, user_ids)
        templates: dict[UUID, ShiftTemplate] = await shift_template_repository.get_many(
            db, {a.shift_template_id for a in assignments}
        )

        def person(user_id: UUID | None) -> dict | None:
            user: User | None = users.get(user_id) if user_id is not None else None
            return {"id": str(user.id), "name": user.name} if user is not None else None

        responses: list[dict] = []
        for a in assignments:
            template: ShiftTemplate | None = templates.get(a.shift_template_id)
            responses.append({
                "id": str(a.id),
                "shift_template_id": str(a.shift_template_id),
                "worker_id": str(a.worker_id),
                "date": a.date,
                "assigned_hours": a.assigned_hours,
                "break_periods": a.break_periods,
                "assigned_by_id": str(a.assigned_by) if a.assigned_by else None,
                "assigned_at": a.assigned_at,
                "status": a.status,
                "resolution": a.resolution,
                "worker_approved_at": a.worker_approved_at,
                "manager_approved_at": a.manager_approved_at,
                "assignment_notes": a.assignment_notes,
                "superseded_by_id": str(a.superseded_by_id) if a.superseded_by_id else None,
                "worker": person(a.worker_id),
                "shift": (
                    {"id": str(template.id), "name": template.name, "type": template.type}
                    if template is not None else None
                ),
                "assigned_by": person(a.assigned_by),
            })
        return responses

    async def build_response(self, db: AsyncSession, assignment: ShiftAssignment) -> dict:
        return (await self.build_responses(db, [assignment]))[0]


# Singleton instance
assignment_service: AssignmentService = AssignmentService()
