"""
Auth Schemas

Pydantic models for OTP request/confirm validation.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RequestOtpRequest(BaseModel):
    """Schema for requesting an OTP."""

    phone_number: str = Field(..., description="Phone number, any formatting")


class RequestOtpResponse(BaseModel):
    """Schema for a freshly issued OTP."""

    phone_number: str
    expires_at: datetime
    max_verify_attempts: int
    debug_code: Optional[str] = Field(None, description="Plaintext code, development only")


class ConfirmOtpRequest(BaseModel):
    """Schema for confirming an OTP."""

    phone_number: str = Field(..., description="Phone number, any formatting")
    code: str = Field(..., description="OTP code")


class ConfirmOtpResponse(BaseModel):
    """Schema for a successful confirmation."""

    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"
    user_id: uuid.UUID
    phone_number: str


class ConfirmOtpErrorResponse(BaseModel):
    """Schema for a wrong code with attempts left."""

    error_code: str
    remaining_attempts: int
    message: str


class ErrorResponse(BaseModel):
    """Schema for domain errors."""

    error_code: str
    message: str
