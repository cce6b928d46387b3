"""
QR Code Record Model

Booking access credentials rendered as QR images.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class QrCodeRecord(Base):
    """
    A generated QR code tied to a booking.

    Attributes:
        id: UUID primary key.
        user_id: Owner of the record.
        check_in_at / check_out_at: Booking window.
        guests_count: Number of guests (1-50).
        door_password: Door password embedded in the payload.
        payload_json: Exact JSON encoded into the QR symbol.
        qr_image_base64: PNG image, base64 encoded.
        data_type: Payload kind, "booking_access" by default.
        created_at: Creation timestamp (history ordering).
    """

    __tablename__ = "qr_code_records"
    __table_args__ = (
        CheckConstraint("guests_count > 0", name="ck_qr_code_records_guests_count_positive"),
        CheckConstraint("check_out_at > check_in_at", name="ck_qr_code_records_checkout_after_checkin"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    check_in_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    check_out_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    guests_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    door_password: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )
    payload_json: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    qr_image_base64: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    data_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="qr_code_records",
    )

    def __repr__(self) -> str:
        return f"<QrCodeRecord(id={self.id}, user_id={self.user_id}, data_type={self.data_type})>"
