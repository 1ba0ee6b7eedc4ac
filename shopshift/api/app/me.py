"""App Me Router: the authenticated user and their capabilities."""

from typing import Annotated

from fastapi import APIRouter, Depends

from shopshift.api.deps import get_current_actor
from shopshift.schemas.user import CurrentUserResponse
from shopshift.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> dict:
    """Return the caller's user record with resolved capabilities."""
    return {
        "id": str(actor.user.id),
        "external_id": actor.user.external_id,
        "name": actor.user.name,
        "email": actor.user.email,
        "capabilities": actor.capabilities,
    }
