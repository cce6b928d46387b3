"""
iLocks QR Backend - Schemas Module

Pydantic models for request/response validation.
"""

from app.schemas.auth import (
    RequestOtpRequest,
    RequestOtpResponse,
    ConfirmOtpRequest,
    ConfirmOtpResponse,
    ConfirmOtpErrorResponse,
    ErrorResponse,
)
from app.schemas.token import TokenPayload
from app.schemas.user import UserResponse
from app.schemas.qr import (
    CreateQrRequest,
    CreateQrResponse,
    QrCodeListItemResponse,
    QrCodeDetailsResponse,
    QrCodeHistoryResponse,
    SendQrToTelegramResponse,
)
from app.schemas.telegram import BindTelegramChatRequest, BindTelegramChatResponse

__all__ = [
    # Auth
    "RequestOtpRequest",
    "RequestOtpResponse",
    "ConfirmOtpRequest",
    "ConfirmOtpResponse",
    "ConfirmOtpErrorResponse",
    "ErrorResponse",
    # Token
    "TokenPayload",
    # User
    "UserResponse",
    # QR
    "CreateQrRequest",
    "CreateQrResponse",
    "QrCodeListItemResponse",
    "QrCodeDetailsResponse",
    "QrCodeHistoryResponse",
    "SendQrToTelegramResponse",
    # Telegram
    "BindTelegramChatRequest",
    "BindTelegramChatResponse",
]
