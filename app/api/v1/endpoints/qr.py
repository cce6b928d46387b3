"""
QR Routes

Create booking QR codes, browse history, and deliver them to Telegram.
"""

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_telegram_sender
from app.core.database import get_db
from app.models.enums import CreateQrStatus, GetQrStatus, SendQrToTelegramStatus
from app.models.user import User
from app.schemas.auth import ErrorResponse
from app.schemas.qr import (
    CreateQrRequest,
    CreateQrResponse,
    QrCodeDetailsResponse,
    QrCodeHistoryResponse,
    QrCodeListItemResponse,
    SendQrToTelegramResponse,
)
from app.services import qr_workflow
from app.services.telegram_service import TelegramQrSender


router = APIRouter(prefix="/qr", tags=["QR"])


# status, title for Telegram failures surfaced as problem responses
_TELEGRAM_FAILURES = {
    SendQrToTelegramStatus.TELEGRAM_CONFIGURATION: (status.HTTP_503_SERVICE_UNAVAILABLE, "Telegram is not configured"),
    SendQrToTelegramStatus.TELEGRAM_FORBIDDEN: (status.HTTP_403_FORBIDDEN, "Telegram access denied"),
    SendQrToTelegramStatus.TELEGRAM_TIMEOUT: (status.HTTP_504_GATEWAY_TIMEOUT, "Telegram timeout"),
    SendQrToTelegramStatus.TELEGRAM_NETWORK: (status.HTTP_503_SERVICE_UNAVAILABLE, "Telegram network failure"),
    SendQrToTelegramStatus.TELEGRAM_INVALID_PAYLOAD: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Stored QR payload is invalid"),
    SendQrToTelegramStatus.TELEGRAM_REMOTE_API: (status.HTTP_502_BAD_GATEWAY, "Telegram API error"),
}


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(error_code="qr_not_found", message="QR record not found.").model_dump(),
    )


@router.post(
    "",
    response_model=CreateQrResponse,
    summary="Generate and save QR",
)
async def create_qr(
    data: CreateQrRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """
    Generate a PNG QR from the booking payload and store it for the
    current user.

    Raises:
        HTTPException: 401 if the user no longer exists.
    """
    result = await qr_workflow.create_qr(
        db,
        current_user.id,
        qr_workflow.CreateQrCommand(
            check_in_at=data.check_in_at,
            check_out_at=data.check_out_at,
            guests_count=data.guests_count,
            door_password=data.door_password,
            data_type=data.data_type,
        ),
    )

    if result.status == CreateQrStatus.UNAUTHORIZED_USER or result.record is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")

    return CreateQrResponse.model_validate(result.record)


@router.get(
    "",
    response_model=QrCodeHistoryResponse,
    summary="Get QR history",
)
async def get_qr_history(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: Annotated[Optional[int], Query()] = None,
    take: Annotated[Optional[int], Query()] = None,
) -> QrCodeHistoryResponse:
    """Return the current user's QR records, newest first, paged."""
    history = await qr_workflow.get_history(db, current_user.id, skip, take)

    return QrCodeHistoryResponse(
        items=[QrCodeListItemResponse.model_validate(item) for item in history.items],
        total=history.total,
        skip=history.skip,
        take=history.take,
    )


@router.get(
    "/{qr_id}",
    response_model=QrCodeDetailsResponse,
    summary="Get QR details by id",
    responses={404: {"model": ErrorResponse}},
)
async def get_qr(
    qr_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return a single QR record owned by the current user."""
    result = await qr_workflow.get_by_id(db, current_user.id, qr_id)

    if result.status == GetQrStatus.NOT_FOUND or result.record is None:
        return _not_found()

    return QrCodeDetailsResponse.model_validate(result.record)


@router.post(
    "/{qr_id}/send-telegram",
    response_model=SendQrToTelegramResponse,
    summary="Send QR to Telegram",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def send_qr_to_telegram(
    qr_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    sender: Annotated[TelegramQrSender, Depends(get_telegram_sender)],
):
    """
    Send the stored QR PNG to the current user's bound Telegram chat.

    **Failures:**
    - 404: QR record not found
    - 400: no chat bound, or Telegram rejected the chat
    - 403/502/503/504/500: Telegram delivery problems
    """
    result = await qr_workflow.send_to_telegram(db, current_user.id, qr_id, sender)

    if result.status == SendQrToTelegramStatus.SUCCESS and result.data is not None:
        return SendQrToTelegramResponse(
            qr_id=result.data.qr_id,
            chat_id=result.data.chat_id,
            sent_at=result.data.sent_at,
            status=result.data.status,
        )

    if result.status == SendQrToTelegramStatus.QR_NOT_FOUND:
        return _not_found()

    if result.status == SendQrToTelegramStatus.TELEGRAM_NOT_BOUND:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error_code="telegram_not_bound",
                message="Telegram chat is not bound for this user.",
            ).model_dump(),
        )

    if result.status == SendQrToTelegramStatus.TELEGRAM_INVALID_CHAT:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error_code="telegram_invalid_chat",
                message=result.error_message or "Invalid Telegram chat or bot has no access to it.",
            ).model_dump(),
        )

    status_code, title = _TELEGRAM_FAILURES.get(
        result.status,
        (status.HTTP_500_INTERNAL_SERVER_ERROR, "Telegram delivery failed"),
    )
    return JSONResponse(
        status_code=status_code,
        content={"title": title, "detail": result.error_message},
    )
