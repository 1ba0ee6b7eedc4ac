"""App Shift Timing Router: lead-time preview for the scheduling UI."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from shopshift.api.deps import get_current_actor
from shopshift.schemas.assignment import TimingPreviewResponse
from shopshift.services.assignment_service import assignment_service
from shopshift.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("", response_model=TimingPreviewResponse)
async def preview_shift_timing(
    shift_date: Annotated[date, Query(alias="date")],
    start_time: Annotated[str, Query(pattern=r"^\d{1,2}:\d{2}$")],
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Hours until a shift starts and which lead-time rules it satisfies.

    Uses the same rules the workflow applies, so the UI never has to
    reimplement the thresholds.
    """
    return assignment_service.preview_timing(shift_date, start_time)
