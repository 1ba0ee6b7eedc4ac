"""FastAPI dependency injection module: Authentication and capabilities.

Authentication Flow:
    1. Client sends Authorization: Bearer <token> issued by the identity provider
    2. HTTPBearer extracts the token (missing header yields no identity)
    3. decode_token() verifies the JWT and returns the payload
    4. The user is looked up by the payload "sub" (users.external_id)
    5. Capabilities are resolved once and handed to services as an Actor
"""

from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.database import get_db
from shopshift.models.user import User
from shopshift.repositories.user_repository import user_repository
from shopshift.services.permission_service import Actor, resolve_capabilities
from shopshift.utils.exceptions import NotFoundError, UnauthorizedError
from shopshift.utils.jwt import decode_token

# auto_error=False so a missing header surfaces as our own 401 message
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict[str, str | None] | None:
    """Decode the bearer token into the caller's identity.

    Args:
        credentials: Bearer token credentials from the header, if any

    Returns:
        dict | None: {"sub", "name", "email"}, or None without a token

    Raises:
        UnauthorizedError: Invalid, expired or non-access token
    """
    if credentials is None:
        return None

    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")
    subject: str | None = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token")

    return {"sub": subject, "name": payload.get("name"), "email": payload.get("email")}


async def get_current_actor(
    identity: Annotated[dict[str, str | None] | None, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Actor:
    """Resolve the authenticated caller and their capabilities.

    Returns:
        Actor: The caller's user record and effective capabilities

    Raises:
        UnauthorizedError: No identity, or the user is inactive
        NotFoundError: The identity has no user record
    """
    if identity is None:
        raise UnauthorizedError()

    user: User | None = await user_repository.get_by_external_id(db, identity["sub"])
    if user is None:
        raise NotFoundError("User not found")
    if not user.is_active:
        raise UnauthorizedError("User is inactive")

    return Actor(user=user, capabilities=resolve_capabilities(user))
