"""
QR Workflow

Creates booking QR records, lists a user's history, and pushes stored
QR images to the user's bound Telegram chat.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    CreateQrStatus,
    GetQrStatus,
    SendQrToTelegramStatus,
    TelegramIntegrationErrorKind,
)
from app.models.qr_code_record import QrCodeRecord
from app.models.telegram_binding import TelegramBinding
from app.models.user import User
from app.services import qr_service
from app.services.telegram_service import TelegramIntegrationError, TelegramQrSender


logger = logging.getLogger(__name__)

DEFAULT_DATA_TYPE = "booking_access"
DEFAULT_HISTORY_TAKE = 20
MAX_HISTORY_TAKE = 100

_TELEGRAM_ERROR_STATUS = {
    TelegramIntegrationErrorKind.CONFIGURATION: SendQrToTelegramStatus.TELEGRAM_CONFIGURATION,
    TelegramIntegrationErrorKind.INVALID_CHAT: SendQrToTelegramStatus.TELEGRAM_INVALID_CHAT,
    TelegramIntegrationErrorKind.FORBIDDEN: SendQrToTelegramStatus.TELEGRAM_FORBIDDEN,
    TelegramIntegrationErrorKind.TIMEOUT: SendQrToTelegramStatus.TELEGRAM_TIMEOUT,
    TelegramIntegrationErrorKind.NETWORK: SendQrToTelegramStatus.TELEGRAM_NETWORK,
    TelegramIntegrationErrorKind.INVALID_PAYLOAD: SendQrToTelegramStatus.TELEGRAM_INVALID_PAYLOAD,
    TelegramIntegrationErrorKind.REMOTE_API: SendQrToTelegramStatus.TELEGRAM_REMOTE_API,
}


@dataclass(frozen=True)
class CreateQrCommand:
    check_in_at: datetime
    check_out_at: datetime
    guests_count: int
    door_password: str
    data_type: str = DEFAULT_DATA_TYPE


@dataclass(frozen=True)
class CreateQrResult:
    status: CreateQrStatus
    record: Optional[QrCodeRecord] = None


@dataclass(frozen=True)
class QrHistory:
    items: list[QrCodeRecord]
    total: int
    skip: int
    take: int


@dataclass(frozen=True)
class GetQrResult:
    status: GetQrStatus
    record: Optional[QrCodeRecord] = None


@dataclass(frozen=True)
class SendQrToTelegramData:
    qr_id: uuid.UUID
    chat_id: int
    sent_at: datetime
    status: str = "sent"


@dataclass(frozen=True)
class SendQrToTelegramResult:
    status: SendQrToTelegramStatus
    data: Optional[SendQrToTelegramData] = None
    error_message: Optional[str] = None


def build_payload_json(
    command: CreateQrCommand,
    data_type: str,
    user: User,
    created_at: datetime,
) -> str:
    """Serialize the booking payload encoded into the QR symbol."""
    payload = {
        "checkInAt": command.check_in_at.isoformat(),
        "checkOutAt": command.check_out_at.isoformat(),
        "guestsCount": command.guests_count,
        "doorPassword": command.door_password,
        "userId": str(user.id),
        "phoneNumber": user.phone_number,
        "dataType": data_type,
        "createdAt": created_at.isoformat(),
    }
    return json.dumps(payload)


async def create_qr(
    db: AsyncSession,
    user_id: uuid.UUID,
    command: CreateQrCommand,
) -> CreateQrResult:
    """
    Render and store a QR record for a user.

    Args:
        db: Database session.
        user_id: Owner of the new record.
        command: Validated booking data.

    Returns:
        CreateQrResult: UNAUTHORIZED_USER if the user no longer exists,
        otherwise SUCCESS with the stored record.
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return CreateQrResult(CreateQrStatus.UNAUTHORIZED_USER)

    now = datetime.now(timezone.utc)
    data_type = command.data_type.strip() if command.data_type and command.data_type.strip() else DEFAULT_DATA_TYPE

    payload_json = build_payload_json(command, data_type, user, now)
    qr_image_base64 = qr_service.generate_png_base64(payload_json)

    record = QrCodeRecord(
        id=uuid.uuid4(),
        user_id=user.id,
        check_in_at=command.check_in_at,
        check_out_at=command.check_out_at,
        guests_count=command.guests_count,
        door_password=command.door_password.strip(),
        payload_json=payload_json,
        qr_image_base64=qr_image_base64,
        data_type=data_type,
        created_at=now,
    )

    db.add(record)
    await db.commit()

    logger.info(f"QR record {record.id} created for user {user.id}")

    return CreateQrResult(CreateQrStatus.SUCCESS, record)


async def get_history(
    db: AsyncSession,
    user_id: uuid.UUID,
    skip: Optional[int] = None,
    take: Optional[int] = None,
) -> QrHistory:
    """
    Page through a user's QR records, newest first.

    skip defaults to 0 and is never negative; take defaults to 20 and is
    clamped to [1, 100].
    """
    resolved_skip = max(0, skip or 0)
    resolved_take = min(max(take or DEFAULT_HISTORY_TAKE, 1), MAX_HISTORY_TAKE)

    total = await db.scalar(
        select(func.count()).select_from(QrCodeRecord).where(QrCodeRecord.user_id == user_id)
    )

    result = await db.execute(
        select(QrCodeRecord)
        .where(QrCodeRecord.user_id == user_id)
        .order_by(QrCodeRecord.created_at.desc())
        .offset(resolved_skip)
        .limit(resolved_take)
    )

    return QrHistory(
        items=list(result.scalars().all()),
        total=total or 0,
        skip=resolved_skip,
        take=resolved_take,
    )


async def get_by_id(db: AsyncSession, user_id: uuid.UUID, qr_id: uuid.UUID) -> GetQrResult:
    """Load one QR record owned by the user."""
    record = await _find_user_record(db, user_id, qr_id)
    if record is None:
        return GetQrResult(GetQrStatus.NOT_FOUND)
    return GetQrResult(GetQrStatus.SUCCESS, record)


async def send_to_telegram(
    db: AsyncSession,
    user_id: uuid.UUID,
    qr_id: uuid.UUID,
    sender: TelegramQrSender,
) -> SendQrToTelegramResult:
    """
    Send a stored QR image to the user's bound Telegram chat.

    Integration failures are reported as statuses carrying the sender's
    message; nothing is written to the database.
    """
    record = await _find_user_record(db, user_id, qr_id)
    if record is None:
        return SendQrToTelegramResult(SendQrToTelegramStatus.QR_NOT_FOUND)

    result = await db.execute(
        select(TelegramBinding).where(TelegramBinding.user_id == user_id)
    )
    binding = result.scalar_one_or_none()
    if binding is None:
        return SendQrToTelegramResult(SendQrToTelegramStatus.TELEGRAM_NOT_BOUND)

    caption = (
        f"QR access ({record.data_type}) | "
        f"{record.check_in_at.isoformat()} - {record.check_out_at.isoformat()}"
    )

    try:
        await sender.send_qr_code(binding.chat_id, record.qr_image_base64, caption)
    except TelegramIntegrationError as e:
        return SendQrToTelegramResult(
            _TELEGRAM_ERROR_STATUS.get(e.kind, SendQrToTelegramStatus.TELEGRAM_REMOTE_API),
            error_message=e.message,
        )

    return SendQrToTelegramResult(
        SendQrToTelegramStatus.SUCCESS,
        SendQrToTelegramData(
            qr_id=record.id,
            chat_id=binding.chat_id,
            sent_at=datetime.now(timezone.utc),
        ),
    )


async def _find_user_record(
    db: AsyncSession,
    user_id: uuid.UUID,
    qr_id: uuid.UUID,
) -> Optional[QrCodeRecord]:
    result = await db.execute(
        select(QrCodeRecord).where(
            and_(
                QrCodeRecord.id == qr_id,
                QrCodeRecord.user_id == user_id,
            )
        )
    )
    return result.scalar_one_or_none()
