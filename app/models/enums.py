"""
Domain Enums

Outcome kinds returned by the service workflows. Endpoints map each
value to an HTTP status and payload.
"""

import enum


class RequestOtpStatus(str, enum.Enum):
    """Outcome of requesting a new OTP."""
    SUCCESS = "SUCCESS"
    INVALID_PHONE = "INVALID_PHONE"


class ConfirmOtpStatus(str, enum.Enum):
    """Outcome of confirming an OTP."""
    SUCCESS = "SUCCESS"
    INVALID_PHONE = "INVALID_PHONE"
    INVALID_CODE_FORMAT = "INVALID_CODE_FORMAT"
    OTP_NOT_FOUND = "OTP_NOT_FOUND"
    OTP_EXPIRED = "OTP_EXPIRED"
    OTP_BLOCKED = "OTP_BLOCKED"
    INVALID_OTP = "INVALID_OTP"


class CreateQrStatus(str, enum.Enum):
    """Outcome of creating a QR record."""
    SUCCESS = "SUCCESS"
    UNAUTHORIZED_USER = "UNAUTHORIZED_USER"


class GetQrStatus(str, enum.Enum):
    """Outcome of loading a single QR record."""
    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"


class BindTelegramChatStatus(str, enum.Enum):
    """Outcome of binding a Telegram chat."""
    SUCCESS = "SUCCESS"
    INVALID_CHAT = "INVALID_CHAT"
    UNAUTHORIZED_USER = "UNAUTHORIZED_USER"
    CHAT_ALREADY_BOUND = "CHAT_ALREADY_BOUND"


class SendQrToTelegramStatus(str, enum.Enum):
    """Outcome of pushing a stored QR image to Telegram."""
    SUCCESS = "SUCCESS"
    QR_NOT_FOUND = "QR_NOT_FOUND"
    TELEGRAM_NOT_BOUND = "TELEGRAM_NOT_BOUND"
    TELEGRAM_CONFIGURATION = "TELEGRAM_CONFIGURATION"
    TELEGRAM_INVALID_CHAT = "TELEGRAM_INVALID_CHAT"
    TELEGRAM_FORBIDDEN = "TELEGRAM_FORBIDDEN"
    TELEGRAM_TIMEOUT = "TELEGRAM_TIMEOUT"
    TELEGRAM_NETWORK = "TELEGRAM_NETWORK"
    TELEGRAM_INVALID_PAYLOAD = "TELEGRAM_INVALID_PAYLOAD"
    TELEGRAM_REMOTE_API = "TELEGRAM_REMOTE_API"


class TelegramIntegrationErrorKind(str, enum.Enum):
    """Failure categories raised by the Telegram sender."""
    CONFIGURATION = "CONFIGURATION"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_CHAT = "INVALID_CHAT"
    FORBIDDEN = "FORBIDDEN"
    TIMEOUT = "TIMEOUT"
    NETWORK = "NETWORK"
    REMOTE_API = "REMOTE_API"
