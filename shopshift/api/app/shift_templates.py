"""App Shift Template Router: read-only template access for staff."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_current_actor
from shopshift.database import get_db
from shopshift.schemas.shift_template import ShiftTemplateResponse
from shopshift.services.permission_service import Actor
from shopshift.services.shift_template_service import shift_template_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[ShiftTemplateResponse])
async def list_active_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    shift_date: Annotated[date | None, Query(alias="date")] = None,
) -> list[dict]:
    """List active templates, optionally only those recurring on a date's weekday.

    Args:
        db: Async database session
        actor: Authenticated caller
        shift_date: Optional date filter (query parameter "date")

    Returns:
        list[dict]: Active templates
    """
    if shift_date is not None:
        templates = await shift_template_service.get_templates_for_date(db, shift_date)
    else:
        templates = await shift_template_service.list_active_templates(db)
    return [shift_template_service.build_response(t) for t in templates]


@router.get("/{template_id}", response_model=ShiftTemplateResponse)
async def get_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    template = await shift_template_service.get_template(db, template_id)
    return shift_template_service.build_response(template)
