"""
OTP Challenge Store

Persistence boundary for OTP challenges and the phone-keyed user directory.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.otp_code import OTPCode
from app.models.user import User


@dataclass(frozen=True)
class ChallengeState:
    """Mutable part of a challenge, written back in a single call."""
    failed_attempts: int
    is_used: bool


class ChallengeStore(Protocol):
    """
    Storage operations used by the OTP lifecycle.

    Changes made through one store instance become durable together on
    commit(); nothing is written if commit() is never reached.
    """

    async def find_unused_by_phone(self, phone_number: str) -> list[OTPCode]: ...

    async def find_latest_unused_by_phone(self, phone_number: str) -> Optional[OTPCode]: ...

    async def find_latest_by_phone(self, phone_number: str) -> Optional[OTPCode]: ...

    async def insert(self, challenge: OTPCode) -> None: ...

    async def apply_state(self, challenge: OTPCode, state: ChallengeState) -> None: ...

    async def find_or_create_user(self, phone_number: str, now: datetime) -> User: ...

    async def commit(self) -> None: ...


class SqlAlchemyChallengeStore:
    """ChallengeStore backed by one AsyncSession (one transaction per operation)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_unused_by_phone(self, phone_number: str) -> list[OTPCode]:
        result = await self.db.execute(
            select(OTPCode).where(
                and_(
                    OTPCode.phone_number == phone_number,
                    OTPCode.is_used == False,  # noqa: E712
                )
            )
        )
        return list(result.scalars().all())

    async def find_latest_unused_by_phone(self, phone_number: str) -> Optional[OTPCode]:
        result = await self.db.execute(
            select(OTPCode)
            .where(
                and_(
                    OTPCode.phone_number == phone_number,
                    OTPCode.is_used == False,  # noqa: E712
                )
            )
            .order_by(OTPCode.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_latest_by_phone(self, phone_number: str) -> Optional[OTPCode]:
        result = await self.db.execute(
            select(OTPCode)
            .where(OTPCode.phone_number == phone_number)
            .order_by(OTPCode.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert(self, challenge: OTPCode) -> None:
        self.db.add(challenge)

    async def apply_state(self, challenge: OTPCode, state: ChallengeState) -> None:
        challenge.failed_attempts = state.failed_attempts
        challenge.is_used = state.is_used

    async def find_or_create_user(self, phone_number: str, now: datetime) -> User:
        """
        Return the user for a phone number, creating it if missing.

        The insert runs inside a savepoint; if a concurrent confirmation
        created the same phone first, the unique constraint fires and the
        existing row is returned instead.
        """
        user = await self._find_user(phone_number)
        if user is not None:
            return user

        user = User(id=uuid.uuid4(), phone_number=phone_number, created_at=now)
        try:
            async with self.db.begin_nested():
                self.db.add(user)
        except IntegrityError:
            user = await self._find_user(phone_number)
            if user is None:
                raise
        return user

    async def commit(self) -> None:
        await self.db.commit()

    async def _find_user(self, phone_number: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.phone_number == phone_number)
        )
        return result.scalar_one_or_none()
