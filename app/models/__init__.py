"""
iLocks QR Backend - Models Module

This module exports all SQLAlchemy models for the application.
Import Base for Alembic migrations.
"""

from app.core.database import Base

# Enums
from app.models.enums import (
    RequestOtpStatus,
    ConfirmOtpStatus,
    CreateQrStatus,
    GetQrStatus,
    BindTelegramChatStatus,
    SendQrToTelegramStatus,
    TelegramIntegrationErrorKind,
)

# Models
from app.models.user import User
from app.models.otp_code import OTPCode
from app.models.qr_code_record import QrCodeRecord
from app.models.telegram_binding import TelegramBinding

__all__ = [
    # Base
    "Base",
    # Enums
    "RequestOtpStatus",
    "ConfirmOtpStatus",
    "CreateQrStatus",
    "GetQrStatus",
    "BindTelegramChatStatus",
    "SendQrToTelegramStatus",
    "TelegramIntegrationErrorKind",
    # Models
    "User",
    "OTPCode",
    "QrCodeRecord",
    "TelegramBinding",
]
