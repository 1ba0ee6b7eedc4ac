"""Admin Hour Request Router: manager review queue."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_current_actor
from shopshift.database import get_db
from shopshift.schemas.hour_request import HourRequestResponse, RequestReview
from shopshift.services.hour_request_service import hour_request_service
from shopshift.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("", response_model=list[HourRequestResponse])
async def list_requests_for_review(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> list[dict]:
    """List pending requests, oldest first, with worker, shift and switch target."""
    requests = await hour_request_service.get_requests_for_review(db, actor)
    return await hour_request_service.build_responses(db, requests)


@router.post("/{request_id}/review", response_model=HourRequestResponse)
async def review_request(
    request_id: UUID,
    data: RequestReview,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Approve or deny a pending request.

    Approving a join request creates a confirmed assignment; approving a
    switch request (after the target worker agreed) swaps the assignments.

    Args:
        request_id: Request UUID
        data: Decision and optional review notes
        db: Async database session
        actor: Authenticated manager

    Returns:
        dict: Reviewed request
    """
    request = await hour_request_service.review_request(db, actor, request_id, data)
    await db.commit()
    return await hour_request_service.build_response(db, request)
