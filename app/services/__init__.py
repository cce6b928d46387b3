"""
iLocks QR Backend - Services Module

Business logic layer.
"""

from app.services import otp_service
from app.services import auth_workflow
from app.services import qr_service
from app.services import qr_workflow
from app.services import telegram_service
from app.services import telegram_workflow

__all__ = [
    "otp_service",
    "auth_workflow",
    "qr_service",
    "qr_workflow",
    "telegram_service",
    "telegram_workflow",
]
