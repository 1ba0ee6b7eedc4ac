"""Admin Shift Template Router: template management (managers only).

Reading templates is part of the staff surface (api/app/shift_templates.py).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.api.deps import get_current_actor
from shopshift.database import get_db
from shopshift.schemas.shift_template import (
    ShiftTemplateCreate,
    ShiftTemplateDeleteResponse,
    ShiftTemplateResponse,
    ShiftTemplateUpdate,
)
from shopshift.services.permission_service import Actor
from shopshift.services.shift_template_service import shift_template_service

router: APIRouter = APIRouter()


@router.post("", response_model=ShiftTemplateResponse, status_code=201)
async def create_shift_template(
    data: ShiftTemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Create a shift template with its hourly staffing requirements.

    Args:
        data: Template creation data
        db: Async database session
        actor: Authenticated manager

    Returns:
        dict: Created template
    """
    template = await shift_template_service.create_template(db, actor, data)
    await db.commit()
    return shift_template_service.build_response(template)


@router.put("/{template_id}", response_model=ShiftTemplateResponse)
async def update_shift_template(
    template_id: UUID,
    data: ShiftTemplateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Update a shift template. Existing assignments keep their hours."""
    template = await shift_template_service.update_template(db, actor, template_id, data)
    await db.commit()
    return shift_template_service.build_response(template)


@router.delete("/{template_id}", response_model=ShiftTemplateDeleteResponse)
async def delete_shift_template(
    template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Delete a template, or only deactivate it when assignments reference it."""
    result: dict[str, bool] = await shift_template_service.delete_template(db, actor, template_id)
    await db.commit()
    return result
