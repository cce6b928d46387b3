"""
QR Schemas

Pydantic models for QR record creation and history.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator


class CreateQrRequest(BaseModel):
    """Schema for creating a booking QR code."""

    check_in_at: datetime
    check_out_at: datetime
    guests_count: int = Field(..., ge=1, le=50, description="Number of guests (1-50)")
    door_password: str = Field(..., min_length=1, max_length=128)
    data_type: str = Field("booking_access", min_length=1, max_length=64)

    @field_validator("check_in_at", "check_out_at")
    @classmethod
    def require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("door_password", "data_type")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def check_booking_window(self) -> "CreateQrRequest":
        if self.check_in_at >= self.check_out_at:
            raise ValueError("check_in_at must be earlier than check_out_at")
        if self.check_out_at <= datetime.now(timezone.utc):
            raise ValueError("check_out_at must be in the future")
        return self


class QrCodeListItemResponse(BaseModel):
    """Schema for one history entry."""

    id: uuid.UUID
    check_in_at: datetime
    check_out_at: datetime
    guests_count: int
    data_type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CreateQrResponse(QrCodeListItemResponse):
    """Schema for a newly created QR record."""

    payload_json: str
    qr_image_base64: str


class QrCodeDetailsResponse(CreateQrResponse):
    """Schema for a single QR record."""

    door_password: str


class QrCodeHistoryResponse(BaseModel):
    """Schema for a page of QR history."""

    items: list[QrCodeListItemResponse]
    total: int
    skip: int
    take: int


class SendQrToTelegramResponse(BaseModel):
    """Schema for a delivered QR code."""

    qr_id: uuid.UUID
    chat_id: int
    sent_at: datetime
    status: str
