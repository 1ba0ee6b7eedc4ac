"""JWT token creation and verification utility module.

Access tokens are issued by the shop's identity provider; this service only
verifies them. create_access_token exists for local development and tests.

JWT Payload Structure:
    {
        "sub": "identity-subject",  # Identity provider subject (users.external_id)
        "name": "Jane Doe",         # Display name, optional
        "email": "jane@shop.test",  # Email, optional
        "exp": 1234567890,          # Expiration UNIX timestamp
        "type": "access"            # Token type discriminator
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from shopshift.config import settings


def create_access_token(data: dict[str, Any]) -> str:
    """Generate a JWT access token with the given payload data.

    Token expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES (default: 30 min).

    Args:
        data: JWT payload data, typically {"sub": subject, "name": ..., "email": ...}

    Returns:
        str: Encoded JWT token string

    Example:
        token = create_access_token({"sub": user.external_id})
    """
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT token string.

    Args:
        token: Encoded JWT token string

    Returns:
        dict[str, Any]: Decoded payload dictionary

    Raises:
        jwt.ExpiredSignatureError: When token has expired
        jwt.InvalidTokenError: When token is invalid
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
