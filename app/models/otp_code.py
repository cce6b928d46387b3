"""
OTP Code Model

Stores one-time passcode challenges issued for phone numbers.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class OTPCode(Base):
    """
    One requested OTP challenge.

    At most one row per phone number has is_used=False. Rows are never
    deleted; a challenge is consumed by success, expiry, exhausting its
    attempts, or being superseded by a newer request.

    Attributes:
        id: UUID primary key.
        phone_number: Normalized digits-only phone number (indexed).
        code_hash: SHA-256 hex of the code; plaintext is never stored.
        expires_at: Absolute expiry (creation + TTL).
        failed_attempts: Wrong guesses so far.
        is_used: True once the challenge reached a terminal state.
        created_at: Creation timestamp, picks the current challenge.
    """

    __tablename__ = "otp_codes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    phone_number: Mapped[str] = mapped_column(
        String(32),
        index=True,
        nullable=False,
    )
    code_hash: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
    )
    failed_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )
    is_used: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<OTPCode(id={self.id}, phone_number={self.phone_number}, is_used={self.is_used})>"
