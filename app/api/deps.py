"""
API Dependencies

Reusable dependencies for API routes including authentication and
service wiring.
"""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import User
from app.schemas.token import TokenPayload
from app.services.auth_workflow import OtpLifecycleManager
from app.services.otp_store import SqlAlchemyChallengeStore
from app.services.telegram_service import TelegramQrSender


# Bearer scheme for token extraction from Authorization header
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency to get the current authenticated user.

    This dependency:
    1. Extracts the JWT token from the Authorization header
    2. Decodes and validates the token
    3. Fetches the user from the database
    4. Raises 401 if token is invalid or user not found

    Raises:
        HTTPException: 401 if authentication fails.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    try:
        token_data = TokenPayload(**payload)
        user_id = uuid.UUID(token_data.sub)
    except (ValidationError, ValueError):
        raise credentials_exception

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return user


def get_otp_manager(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OtpLifecycleManager:
    """OTP lifecycle manager bound to the request's database session."""
    return OtpLifecycleManager(
        store=SqlAlchemyChallengeStore(db),
        policy=settings.otp_policy,
    )


def get_telegram_sender() -> TelegramQrSender:
    """Telegram sender configured from settings."""
    return TelegramQrSender()


def include_debug_code() -> bool:
    """Plaintext OTP codes are only returned in development."""
    return settings.is_development
