"""Permission Service: capability resolution and guards.

The shop grants capabilities through tags layered on the staff flag:

    is_staff                          -> staff
    is_staff + worker_tag             -> worker
    is_staff + worker_tag + manager_tag -> manager

Emulation columns, when set, replace the real flag. Capabilities are
resolved once per request (see api.deps.get_current_actor) and passed to
the services inside an Actor.
"""

from typing import NamedTuple
from uuid import UUID

from shopshift.models.user import User
from shopshift.schemas.user import Capabilities
from shopshift.utils.exceptions import ForbiddenError


class Actor(NamedTuple):
    """Authenticated caller of a service operation."""

    user: User
    capabilities: Capabilities

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def is_worker(self) -> bool:
        return self.capabilities.is_worker

    @property
    def is_manager(self) -> bool:
        return self.capabilities.is_manager


def _effective(emulated: bool | None, real: bool | None) -> bool:
    if emulated is not None:
        return emulated
    return bool(real)


def resolve_capabilities(user: User) -> Capabilities:
    """Resolve a user's effective capability set.

    Args:
        user: User record from the directory

    Returns:
        Capabilities: Effective staff / worker / manager flags
    """
    is_staff: bool = _effective(user.emulating_is_staff, user.is_staff)
    worker_tag: bool = _effective(user.emulating_worker_tag, user.worker_tag)
    manager_tag: bool = _effective(user.emulating_manager_tag, user.manager_tag)

    is_worker: bool = is_staff and worker_tag
    return Capabilities(
        is_staff=is_staff,
        is_worker=is_worker,
        is_manager=is_worker and manager_tag,
    )


def require_worker(actor: Actor) -> None:
    """Raise ForbiddenError unless the actor has worker capability."""
    if not actor.is_worker:
        raise ForbiddenError("Worker access required")


def require_manager(actor: Actor) -> None:
    """Raise ForbiddenError unless the actor has manager capability."""
    if not actor.is_manager:
        raise ForbiddenError("Manager access required")
