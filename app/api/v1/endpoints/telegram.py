"""
Telegram Routes

Binding a Telegram chat to the current user.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.enums import BindTelegramChatStatus
from app.models.user import User
from app.schemas.auth import ErrorResponse
from app.schemas.telegram import BindTelegramChatRequest, BindTelegramChatResponse
from app.services import telegram_workflow


router = APIRouter(prefix="/telegram", tags=["Telegram"])


@router.post(
    "/bind-chat",
    response_model=BindTelegramChatResponse,
    summary="Bind Telegram chat",
    responses={409: {"model": ErrorResponse}},
)
async def bind_chat(
    data: BindTelegramChatRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """
    Bind a Telegram chat id to the current user.

    One chat cannot be shared between users; binding again replaces the
    user's previous chat.

    Raises:
        HTTPException: 400 if chat_id is not positive.
        HTTPException: 401 if the user no longer exists.
    """
    result = await telegram_workflow.bind_chat(db, current_user.id, data.chat_id)

    if result.status == BindTelegramChatStatus.SUCCESS and result.data is not None:
        return BindTelegramChatResponse(
            user_id=result.data.user_id,
            chat_id=result.data.chat_id,
            bound_at=result.data.bound_at,
        )

    if result.status == BindTelegramChatStatus.INVALID_CHAT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"errors": {"chat_id": ["chat_id must be greater than zero."]}},
        )

    if result.status == BindTelegramChatStatus.UNAUTHORIZED_USER:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")

    if result.status == BindTelegramChatStatus.CHAT_ALREADY_BOUND:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=ErrorResponse(
                error_code="telegram_chat_already_bound",
                message="This Telegram chat is already linked to another user.",
            ).model_dump(),
        )

    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
