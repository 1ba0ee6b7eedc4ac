"""App Hour Request Router: worker requests and switch responses."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_current_actor
from shopshift.database import get_db
from shopshift.schemas.hour_request import (
    HourRequestCreate,
    HourRequestResponse,
    JoinShiftRequestCreate,
    SwitchRequestCreate,
    SwitchResponse,
)
from shopshift.services.hour_request_service import hour_request_service
from shopshift.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("", response_model=list[HourRequestResponse])
async def get_my_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> list[dict]:
    """List the caller's own requests, newest first."""
    requests = await hour_request_service.get_my_requests(db, actor)
    return await hour_request_service.build_responses(db, requests)


@router.get("/incoming-switches", response_model=list[HourRequestResponse])
async def get_incoming_switch_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> list[dict]:
    """List pending switch requests that ask the caller to swap."""
    requests = await hour_request_service.get_switch_requests_for_worker(db, actor)
    return await hour_request_service.build_responses(db, requests)


@router.post("/join", response_model=HourRequestResponse, status_code=201)
async def request_join_shift(
    data: JoinShiftRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Ask a manager to be added to a shift.

    Args:
        data: Template, date, hour range, reason and priority
        db: Async database session
        actor: Authenticated worker

    Returns:
        dict: The pending request
    """
    request = await hour_request_service.request_join_shift(db, actor, data)
    await db.commit()
    return await hour_request_service.build_response(db, request)


@router.post("/switch", response_model=HourRequestResponse, status_code=201)
async def request_switch(
    data: SwitchRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Propose swapping one of the caller's confirmed assignments with a colleague's."""
    request = await hour_request_service.request_switch(db, actor, data)
    await db.commit()
    return await hour_request_service.build_response(db, request)


@router.post("", response_model=HourRequestResponse, status_code=201)
async def submit_hour_request(
    data: HourRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """File an extra-hours, time-off or schedule-change request."""
    request = await hour_request_service.submit_hour_request(db, actor, data)
    await db.commit()
    return await hour_request_service.build_response(db, request)


@router.post("/{request_id}/respond", response_model=HourRequestResponse)
async def respond_to_switch_request(
    request_id: UUID,
    data: SwitchResponse,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Answer a switch request as its target. Declining closes the request."""
    request = await hour_request_service.respond_to_switch_request(db, actor, request_id, data)
    await db.commit()
    return await hour_request_service.build_response(db, request)


@router.post("/{request_id}/cancel", response_model=HourRequestResponse)
async def cancel_request(
    request_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    request = await hour_request_service.cancel_request(db, actor, request_id)
    await db.commit()
    return await hour_request_service.build_response(db, request)
