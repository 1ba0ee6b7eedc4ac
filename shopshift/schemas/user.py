"""User and capability Pydantic schema definitions."""

from pydantic import BaseModel, ConfigDict


class Capabilities(BaseModel):
    """Effective capability set of a user, resolved once per request.

    Attributes:
        is_staff: Base staff flag
        is_worker: Staff with the worker tag
        is_manager: Worker with the manager tag
    """

    model_config = ConfigDict(frozen=True)

    is_staff: bool = False
    is_worker: bool = False
    is_manager: bool = False


class CurrentUserResponse(BaseModel):
    """The authenticated user with resolved capabilities."""

    id: str
    external_id: str
    name: str
    email: str | None
    capabilities: Capabilities
