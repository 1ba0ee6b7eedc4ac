"""Admin Shift Assignment Router: manager-only assignment operations.

Approval, rejection, edits and listings are shared with workers and live
on the staff surface (api/app/shift_assignments.py).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_current_actor
from shopshift.database import get_db
from shopshift.schemas.assignment import AssignmentCreate
from shopshift.schemas.common import MutationResponse
from shopshift.services.assignment_service import assignment_service
from shopshift.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.post("", response_model=MutationResponse, status_code=201)
async def assign_worker_to_shift(
    data: AssignmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Assign a worker to a shift template on a date.

    Self-assignments are confirmed immediately; other workers must approve.

    Args:
        data: Assignment data (template, worker, date, hours, breaks, notes)
        db: Async database session
        actor: Authenticated manager

    Returns:
        dict: New assignment id and status
    """
    assignment = await assignment_service.assign_worker_to_shift(db, actor, data)
    await db.commit()
    return {"id": str(assignment.id), "status": assignment.status}


@router.post("/{assignment_id}/complete", response_model=MutationResponse)
async def complete_assignment(
    assignment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Mark a confirmed, started assignment as completed."""
    assignment = await assignment_service.complete_assignment(db, actor, assignment_id)
    await db.commit()
    return {"id": str(assignment.id), "status": assignment.status}
