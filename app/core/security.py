"""
Security Utilities

JWT access token issuance and validation.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.core.config import settings


@dataclass(frozen=True)
class AccessToken:
    """Issued bearer credential and its absolute expiry."""
    access_token: str
    expires_at: datetime


def create_access_token(
    user_id: uuid.UUID,
    phone_number: str,
    expires_delta: timedelta | None = None,
) -> AccessToken:
    """
    Create a JWT access token for a phone-authenticated user.

    Args:
        user_id: The user the token is issued for (stored as `sub`).
        phone_number: Normalized phone number (stored as `phone`).
        expires_delta: Optional custom lifetime.

    Returns:
        AccessToken: Encoded JWT and its expiry timestamp.
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "phone": phone_number,
        "jti": str(uuid.uuid4()),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "nbf": now,
        "exp": expire,
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    return AccessToken(access_token=encoded_jwt, expires_at=expire)


def decode_access_token(token: str) -> dict | None:
    """
    Decode and validate a JWT access token.

    Signature, issuer, audience and lifetime are all checked.

    Args:
        token: JWT token string to decode.

    Returns:
        dict: Decoded token payload if valid, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
        return payload
    except JWTError:
        return None
