"""
User Schemas

Pydantic models for user responses.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    """Schema for user response."""

    id: uuid.UUID
    phone_number: str
    created_at: datetime

    model_config = {"from_attributes": True}
