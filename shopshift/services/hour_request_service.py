"""Hour Request Service: worker requests and manager review.

Request lifecycle:
    pending -> approved / denied / cancelled

An approved join request materialises a confirmed assignment. A switch
request needs the target worker's consent before a manager may approve
it; approval swaps the two assignments copy-on-write, so neither
worker's existing row changes until the manager decides.
"""

from datetime import date, datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.assignment import CONFIRMED, ShiftAssignment
from shopshift.models.hour_request import (
    APPROVED,
    CANCELLED,
    DENIED,
    JOIN_SHIFT,
    PENDING,
    SWITCH_REQUEST,
    HourRequest,
)
from shopshift.models.shift_template import ShiftTemplate
from shopshift.models.user import User
from shopshift.repositories.assignment_repository import assignment_repository
from shopshift.repositories.hour_request_repository import hour_request_repository
from shopshift.repositories.shift_template_repository import shift_template_repository
from shopshift.repositories.user_repository import user_repository
from shopshift.schemas.hour_request import (
    HourRequestCreate,
    JoinShiftRequestCreate,
    RequestReview,
    SwitchRequestCreate,
    SwitchResponse,
)
from shopshift.services.assignment_service import ALREADY_ASSIGNED, assignment_service
from shopshift.services.permission_service import Actor, require_manager, require_worker
from shopshift.services.shift_template_service import shift_template_service
from shopshift.utils.exceptions import (
    BadRequestError,
    ConflictError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
)
from shopshift.utils.shift_time import utc_now

PENDING_EXISTS: str = "You already have a pending request for this shift on this date"


class HourRequestService:
    """Hour request service."""

    # --- Reads ---------------------------------------------------------------

    async def get_requests_for_review(self, db: AsyncSession, actor: Actor) -> Sequence[HourRequest]:
        require_manager(actor)
        return await hour_request_repository.get_pending(db)

    async def get_my_requests(self, db: AsyncSession, actor: Actor) -> Sequence[HourRequest]:
        require_worker(actor)
        return await hour_request_repository.get_for_worker(db, actor.id)

    async def get_switch_requests_for_worker(self, db: AsyncSession, actor: Actor) -> list[HourRequest]:
        """Pending switch requests waiting on the caller as swap target."""
        require_worker(actor)
        return await hour_request_repository.get_pending_switches_for_target(db, actor.id)

    # --- Creation ------------------------------------------------------------

    async def request_join_shift(
        self,
        db: AsyncSession,
        actor: Actor,
        data: JoinShiftRequestCreate,
    ) -> HourRequest:
        """Ask a manager to add the caller to a shift.

        Args:
            db: Async database session
            actor: Authenticated caller
            data: Template, date, hours and reason

        Returns:
            HourRequest: The pending request

        Raises:
            ForbiddenError: When the caller is not a worker
            NotFoundError: When the template does not exist
            BadRequestError: When the template is inactive or hours are invalid
            DuplicateError: When the caller already holds the shift or has a
                pending request for it
        """
        require_worker(actor)

        template: ShiftTemplate = await shift_template_service.get_active_template(db, data.shift_template_id)
        hours: dict[str, Any] = data.requested_hours.model_dump()
        shift_template_service.validate_hours(template, [hours])

        if await assignment_repository.find_active(db, actor.id, template.id, data.date) is not None:
            raise DuplicateError("You are already assigned to this shift on this date")
        await self._ensure_no_pending(db, actor.id, template.id, data.date)

        return await hour_request_repository.create(
            db,
            {
                "worker_id": actor.id,
                "shift_template_id": template.id,
                "date": data.date,
                "request_type": JOIN_SHIFT,
                "requested_hours": hours,
                "reason": data.reason,
                "priority": data.priority,
                "status": PENDING,
            },
            duplicate_detail=PENDING_EXISTS,
        )

    async def request_switch(
        self,
        db: AsyncSession,
        actor: Actor,
        data: SwitchRequestCreate,
    ) -> HourRequest:
        """Propose swapping one of the caller's assignments with a colleague's.

        Raises:
            ForbiddenError: When the caller is not a worker or does not own
                the first assignment
            NotFoundError: When either assignment does not exist
            BadRequestError: When the target assignment is the caller's own
            ConflictError: When either assignment is not confirmed, or a
                request for the caller's shift is already pending
        """
        require_worker(actor)

        own: ShiftAssignment | None = await assignment_repository.get_by_id(db, data.assignment_id)
        if own is None:
            raise NotFoundError("Assignment not found")
        if own.worker_id != actor.id:
            raise ForbiddenError("You can only switch your own assignments")

        target: ShiftAssignment | None = await assignment_repository.get_by_id(db, data.target_assignment_id)
        if target is None:
            raise NotFoundError("Target assignment not found")
        if target.worker_id == actor.id:
            raise BadRequestError("Cannot switch with your own assignment")
        if own.status != CONFIRMED or target.status != CONFIRMED:
            raise ConflictError("Only confirmed assignments can be switched")

        await self._ensure_no_pending(db, actor.id, own.shift_template_id, own.date)

        return await hour_request_repository.create(
            db,
            {
                "worker_id": actor.id,
                "shift_template_id": own.shift_template_id,
                "date": own.date,
                "request_type": SWITCH_REQUEST,
                "switch_details": {
                    "requester_assignment_id": str(own.id),
                    "target_assignment_id": str(target.id),
                    "target_worker_id": str(target.worker_id),
                    "target_worker_response": None,
                },
                "reason": data.reason,
                "priority": data.priority,
                "status": PENDING,
            },
            duplicate_detail=PENDING_EXISTS,
        )

    async def submit_hour_request(
        self,
        db: AsyncSession,
        actor: Actor,
        data: HourRequestCreate,
    ) -> HourRequest:
        """File an extra-hours, time-off or schedule-change request.

        These requests are informational for the reviewing manager;
        approving them changes no assignment.
        """
        require_worker(actor)

        template: ShiftTemplate = await shift_template_service.get_active_template(db, data.shift_template_id)
        hours: dict[str, Any] | None = None
        if data.requested_hours is not None:
            hours = data.requested_hours.model_dump()
            shift_template_service.validate_hours(template, [hours])

        await self._ensure_no_pending(db, actor.id, template.id, data.date)

        return await hour_request_repository.create(
            db,
            {
                "worker_id": actor.id,
                "shift_template_id": template.id,
                "date": data.date,
                "request_type": data.request_type,
                "requested_hours": hours,
                "reason": data.reason,
                "priority": data.priority,
                "status": PENDING,
            },
            duplicate_detail=PENDING_EXISTS,
        )

    # --- Transitions ---------------------------------------------------------

    async def review_request(
        self,
        db: AsyncSession,
        actor: Actor,
        request_id: UUID,
        data: RequestReview,
    ) -> HourRequest:
        """Approve or deny a pending request (managers only).

        Approving a join request creates a confirmed assignment unless the
        worker already holds the shift, in which case the request is approved
        without a new row. Approving a switch request swaps the two
        assignments. Denial has no effect on assignments.

        Args:
            db: Async database session
            actor: Authenticated caller
            request_id: Request to review
            data: Decision and optional notes

        Returns:
            HourRequest: The reviewed request

        Raises:
            ForbiddenError: When the caller is not a manager
            NotFoundError: When the request does not exist
            ConflictError: When the request is no longer pending or the switch
                lacks the target's consent
        """
        require_manager(actor)
        request: HourRequest = await self._get_or_404(db, request_id)

        if request.status != PENDING:
            raise ConflictError("Request has already been reviewed")

        if data.decision == APPROVED:
            if request.request_type == JOIN_SHIFT:
                joined: ShiftAssignment | None = await self._materialise_join(db, actor, request)
                if joined is not None:
                    request.created_assignment_id = joined.id
            elif request.request_type == SWITCH_REQUEST:
                switched: ShiftAssignment = await self._apply_switch(db, actor, request)
                request.created_assignment_id = switched.id

        request.status = data.decision
        request.reviewed_by = actor.id
        request.reviewed_at = utc_now()
        request.review_notes = data.review_notes
        await db.flush()
        return request

    async def respond_to_switch_request(
        self,
        db: AsyncSession,
        actor: Actor,
        request_id: UUID,
        data: SwitchResponse,
    ) -> HourRequest:
        """Target worker consents to or declines a switch.

        A decline ends the request immediately; a consent leaves it pending
        for the manager.

        Raises:
            ForbiddenError: When the caller is not the switch target
            NotFoundError: When the request does not exist
            BadRequestError: When the request is not a switch request
            ConflictError: When the request is closed or already answered
        """
        require_worker(actor)
        request: HourRequest = await self._get_or_404(db, request_id)

        if request.request_type != SWITCH_REQUEST:
            raise BadRequestError("This is not a switch request")
        details: dict[str, Any] = dict(request.switch_details or {})
        if details.get("target_worker_id") != str(actor.id):
            raise ForbiddenError("You are not the target of this switch request")
        if request.status != PENDING:
            raise ConflictError("This request has already been processed")
        if details.get("target_worker_response") is not None:
            raise ConflictError("You have already responded to this request")

        details["target_worker_response"] = data.response
        # Reassign the dict so the JSON column is marked dirty
        request.switch_details = details
        if data.response == DENIED:
            request.status = DENIED

        await db.flush()
        return request

    async def cancel_request(
        self,
        db: AsyncSession,
        actor: Actor,
        request_id: UUID,
    ) -> HourRequest:
        """Withdraw the caller's own pending request.

        Only the requester is checked, so a worker whose tags were removed
        since filing can still withdraw.

        Raises:
            ForbiddenError: When the caller did not file the request
            NotFoundError: When the request does not exist
            ConflictError: When the request is no longer pending
        """
        request: HourRequest = await self._get_or_404(db, request_id)

        if request.worker_id != actor.id:
            raise ForbiddenError("You can only cancel your own requests")
        if request.status != PENDING:
            raise ConflictError("Only pending requests can be cancelled")

        request.status = CANCELLED
        await db.flush()
        return request

    # --- Helpers -------------------------------------------------------------

    async def _get_or_404(self, db: AsyncSession, request_id: UUID) -> HourRequest:
        request: HourRequest | None = await hour_request_repository.get_by_id(db, request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    async def _ensure_no_pending(
        self,
        db: AsyncSession,
        worker_id: UUID,
        shift_template_id: UUID,
        request_date: date,
    ) -> None:
        if await hour_request_repository.find_pending(db, worker_id, shift_template_id, request_date) is not None:
            raise DuplicateError(PENDING_EXISTS)

    async def _materialise_join(
        self,
        db: AsyncSession,
        actor: Actor,
        request: HourRequest,
    ) -> ShiftAssignment | None:
        """Create the confirmed assignment for an approved join request.

        Returns None when the worker already holds the shift, e.g. a manager
        assigned them directly after the request was filed.
        """
        if await assignment_repository.find_active(
            db, request.worker_id, request.shift_template_id, request.date
        ) is not None:
            return None

        now: datetime = utc_now()
        return await assignment_repository.create(
            db,
            {
                "shift_template_id": request.shift_template_id,
                "worker_id": request.worker_id,
                "date": request.date,
                "assigned_hours": [request.requested_hours] if request.requested_hours else [],
                "assigned_by": actor.id,
                "assigned_at": now,
                "status": CONFIRMED,
                "worker_approved_at": now,
                "manager_approved_at": now,
                "assignment_notes": f"Approved join request: {request.reason or 'No reason provided'}",
            },
            duplicate_detail=ALREADY_ASSIGNED,
        )

    async def _apply_switch(
        self,
        db: AsyncSession,
        actor: Actor,
        request: HourRequest,
    ) -> ShiftAssignment:
        """Swap the workers of the two assignments named by a switch request.

        Both originals are superseded by new confirmed rows with the
        workers exchanged.

        Returns:
            ShiftAssignment: The requester's new assignment (the target's old shift)
        """
        details: dict[str, Any] = request.switch_details or {}
        if details.get("target_worker_response") != APPROVED:
            raise ConflictError("The target worker has not approved this switch")

        own: ShiftAssignment | None = await assignment_repository.get_by_id(
            db, UUID(details["requester_assignment_id"])
        )
        target: ShiftAssignment | None = await assignment_repository.get_by_id(
            db, UUID(details["target_assignment_id"])
        )
        if own is None or target is None:
            raise ConflictError("Switched assignments are no longer active")

        requester_new, _ = await assignment_service.swap_workers(
            db, actor, own, target, note=f"Switched via request: {request.id}"
        )
        return requester_new

    # --- Responses -----------------------------------------------------------

    async def build_responses(
        self,
        db: AsyncSession,
        requests: Sequence[HourRequest],
    ) -> list[dict]:
        """Build response dicts with worker, shift, switch target and reviewer references."""
        user_ids: set[UUID] = set()
        for r in requests:
            user_ids.add(r.worker_id)
            if r.reviewed_by is not None:
                user_ids.add(r.reviewed_by)
            if r.switch_details and r.switch_details.get("target_worker_id"):
                user_ids.add(UUID(r.switch_details["target_worker_id"]))
        users: dict[UUID, User] = await user_repository.get_many(db, user_ids)
        templates: dict[UUID, ShiftTemplate] = await shift_template_repository.get_many(
            db, {r.shift_template_id for r in requests}
        )

        def person(user_id: UUID | None) -> dict | None:
            user: User | None = users.get(user_id) if user_id is not None else None
            return {"id": str(user.id), "name": user.name} if user is not None else None

        responses: list[dict] = []
        for r in requests:
            template: ShiftTemplate | None = templates.get(r.shift_template_id)
            target_id: str | None = (r.switch_details or {}).get("target_worker_id")
            responses.append({
                "id": str(r.id),
                "worker_id": str(r.worker_id),
                "shift_template_id": str(r.shift_template_id),
                "date": r.date,
                "request_type": r.request_type,
                "requested_hours": r.requested_hours,
                "switch_details": r.switch_details,
                "reason": r.reason,
                "priority": r.priority,
                "status": r.status,
                "reviewed_by_id": str(r.reviewed_by) if r.reviewed_by else None,
                "reviewed_at": r.reviewed_at,
                "review_notes": r.review_notes,
                "created_assignment_id": str(r.created_assignment_id) if r.created_assignment_id else None,
                "created_at": r.created_at,
                "worker": person(r.worker_id),
                "shift": (
                    {"id": str(template.id), "name": template.name, "type": template.type}
                    if template is not None else None
                ),
                "target_worker": person(UUID(target_id)) if target_id else None,
                "reviewed_by": person(r.reviewed_by),
            })
        return responses

    async def build_response(self, db: AsyncSession, request: HourRequest) -> dict:
        return (await self.build_responses(db, [request]))[0]


# Singleton instance
hour_request_service: HourRequestService = HourRequestService()
