"""
User Model

A user is identified by their normalized phone number.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.qr_code_record import QrCodeRecord
    from app.models.telegram_binding import TelegramBinding


class User(Base):
    """
    User created lazily on the first successful OTP confirmation.

    Attributes:
        id: UUID primary key for public-facing identification.
        phone_number: Unique normalized phone number.
        created_at: Account creation timestamp.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    phone_number: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        index=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Relationships
    qr_code_records: Mapped[list["QrCodeRecord"]] = relationship(
        "QrCodeRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
        passive_deletes=True,
    )
    telegram_binding: Mapped[Optional["TelegramBinding"]] = relationship(
        "TelegramBinding",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="select",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, phone_number={self.phone_number})>"
