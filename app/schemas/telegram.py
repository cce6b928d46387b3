"""
Telegram Schemas

Pydantic models for Telegram chat binding.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class BindTelegramChatRequest(BaseModel):
    """Schema for binding a Telegram chat."""

    chat_id: int = Field(..., description="Telegram chat id")


class BindTelegramChatResponse(BaseModel):
    """Schema for a bound chat."""

    user_id: uuid.UUID
    chat_id: int
    bound_at: datetime
