"""App Shift Assignment Router: assignment listings and the approval workflow.

Endpoints shared by workers and managers. Who may do what is decided by
the service from the caller's capabilities, so the same endpoint serves a
worker approving their own assignment and a manager approving a join.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_current_actor
from shopshift.database import get_db
from shopshift.schemas.assignment import (
    AssignmentEdit,
    AssignmentReject,
    AssignmentResponse,
    JoinShiftCreate,
)
from shopshift.schemas.common import MutationResponse
from shopshift.services.assignment_service import assignment_service
from shopshift.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("", response_model=list[AssignmentResponse])
async def get_assignments_for_date(
    shift_date: Annotated[date, Query(alias="date")],
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> list[dict]:
    """List the non-rejected assignments of a date with display references.

    Args:
        shift_date: Date to list (query parameter "date")
        db: Async database session
        actor: Authenticated caller

    Returns:
        list[dict]: Assignments with worker, shift and assigner references
    """
    assignments = await assignment_service.get_assignments_for_date(db, shift_date)
    return await assignment_service.build_responses(db, assignments)


@router.get("/pending", response_model=list[AssignmentResponse])
async def get_pending_assignments(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> list[dict]:
    """Pending assignments: all for managers, own awaiting approval for workers."""
    assignments = await assignment_service.get_pending_assignments(db, actor)
    return await assignment_service.build_responses(db, assignments)


@router.get("/workers/{worker_id}", response_model=list[AssignmentResponse])
async def get_assignments_for_worker(
    worker_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
) -> list[dict]:
    """List a worker's non-rejected assignments within an optional inclusive date range."""
    assignments = await assignment_service.get_assignments_for_worker(db, worker_id, start_date, end_date)
    return await assignment_service.build_responses(db, assignments)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Assignment detail, including rejected history rows (worker or manager)."""
    assignment = await assignment_service.get_assignment(db, actor, assignment_id)
    return await assignment_service.build_response(db, assignment)


@router.post("/join", response_model=MutationResponse, status_code=201)
async def request_join_shift(
    data: JoinShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Join a shift directly.

    Confirmed at once for managers and for shifts far enough ahead;
    otherwise waits for a manager.
    """
    assignment = await assignment_service.request_join_shift(db, actor, data)
    await db.commit()
    return {"id": str(assignment.id), "status": assignment.status}


@router.post("/{assignment_id}/approve", response_model=MutationResponse)
async def approve_assignment(
    assignment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    assignment = await assignment_service.approve_assignment(db, actor, assignment_id)
    await db.commit()
    return {"id": str(assignment.id), "status": assignment.status}


@router.post("/{assignment_id}/reject", response_model=MutationResponse)
async def reject_assignment(
    assignment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    data: AssignmentReject | None = None,
) -> dict:
    reason: str | None = data.reason if data is not None else None
    assignment = await assignment_service.reject_assignment(db, actor, assignment_id, reason)
    await db.commit()
    return {"id": str(assignment.id), "status": assignment.status}


@router.post("/{assignment_id}/edit", response_model=MutationResponse, status_code=201)
async def edit_assignment(
    assignment_id: UUID,
    data: AssignmentEdit,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Replace an assignment with an edited copy.

    Args:
        assignment_id: Assignment to edit
        data: New hours and notes
        db: Async database session
        actor: Authenticated caller (assigned worker or manager)

    Returns:
        dict: The replacement assignment's id and status
    """
    replacement = await assignment_service.edit_assignment(db, actor, assignment_id, data)
    await db.commit()
    return {"id": str(replacement.id), "status": replacement.status}
