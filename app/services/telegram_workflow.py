"""
Telegram Workflow

Binds a Telegram chat to a user so QR codes can be delivered there.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import BindTelegramChatStatus
from app.models.telegram_binding import TelegramBinding
from app.models.user import User


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BindTelegramChatData:
    user_id: uuid.UUID
    chat_id: int
    bound_at: datetime


@dataclass(frozen=True)
class BindTelegramChatResult:
    status: BindTelegramChatStatus
    data: Optional[BindTelegramChatData] = None


async def bind_chat(db: AsyncSession, user_id: uuid.UUID, chat_id: int) -> BindTelegramChatResult:
    """
    Bind (or rebind) a Telegram chat to a user.

    **Rules:**
    1. chat_id must be positive
    2. The user must exist
    3. A chat already bound to another user cannot be taken over
    4. A user has at most one binding; rebinding replaces the chat

    Args:
        db: Database session.
        user_id: Current user.
        chat_id: Telegram chat id.

    Returns:
        BindTelegramChatResult: The outcome and the binding on success.
    """
    if chat_id <= 0:
        return BindTelegramChatResult(BindTelegramChatStatus.INVALID_CHAT)

    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        return BindTelegramChatResult(BindTelegramChatStatus.UNAUTHORIZED_USER)

    result = await db.execute(
        select(TelegramBinding).where(TelegramBinding.chat_id == chat_id)
    )
    existing_by_chat = result.scalar_one_or_none()
    if existing_by_chat is not None and existing_by_chat.user_id != user_id:
        logger.warning(f"Chat {chat_id} is already bound to another user")
        return BindTelegramChatResult(BindTelegramChatStatus.CHAT_ALREADY_BOUND)

    now = datetime.now(timezone.utc)

    if existing_by_chat is not None:
        binding = existing_by_chat
    else:
        result = await db.execute(
            select(TelegramBinding).where(TelegramBinding.user_id == user_id)
        )
        binding = result.scalar_one_or_none()

    if binding is None:
        binding = TelegramBinding(
            id=uuid.uuid4(),
            user_id=user_id,
            chat_id=chat_id,
            created_at=now,
        )
        db.add(binding)
    else:
        binding.chat_id = chat_id
        binding.created_at = now

    await db.commit()

    logger.info(f"Telegram chat {chat_id} bound to user {user_id}")

    return BindTelegramChatResult(
        BindTelegramChatStatus.SUCCESS,
        BindTelegramChatData(
            user_id=binding.user_id,
            chat_id=binding.chat_id,
            bound_at=binding.created_at,
        ),
    )
