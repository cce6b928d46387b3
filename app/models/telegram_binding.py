"""
Telegram Binding Model

Links a user to the Telegram chat that receives their QR codes.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class TelegramBinding(Base):
    """
    One chat per user, and a chat cannot be shared between users.

    Attributes:
        id: UUID primary key.
        user_id: Bound user (unique).
        chat_id: Telegram chat id (unique).
        created_at: When the chat was (re)bound.
    """

    __tablename__ = "telegram_bindings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    chat_id: Mapped[int] = mapped_column(
        BigInteger,
        unique=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="telegram_binding",
    )

    def __repr__(self) -> str:
        return f"<TelegramBinding(user_id={self.user_id}, chat_id={self.chat_id})>"
