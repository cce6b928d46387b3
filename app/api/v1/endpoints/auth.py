"""
Authentication Routes

Phone OTP login: request a one-time code, then confirm it for a JWT.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.api.deps import get_otp_manager, include_debug_code
from app.middleware.rate_limit import otp_request_limiter, rate_limit
from app.models.enums import ConfirmOtpStatus, RequestOtpStatus
from app.schemas.auth import (
    ConfirmOtpErrorResponse,
    ConfirmOtpRequest,
    ConfirmOtpResponse,
    ErrorResponse,
    RequestOtpRequest,
    RequestOtpResponse,
)
from app.services.auth_workflow import OtpLifecycleManager


router = APIRouter(prefix="/auth", tags=["Authentication"])

INVALID_PHONE_MESSAGE = "Phone number must contain 10-15 digits."


def _validation_error(field: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"errors": {field: [message]}},
    )


def _error(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error_code=error_code, message=message).model_dump(),
    )


@router.post(
    "/request-otp",
    response_model=RequestOtpResponse,
    summary="Request OTP by phone",
    dependencies=[Depends(rate_limit(otp_request_limiter))],
)
async def request_otp(
    data: RequestOtpRequest,
    manager: Annotated[OtpLifecycleManager, Depends(get_otp_manager)],
    debug: Annotated[bool, Depends(include_debug_code)],
) -> RequestOtpResponse:
    """
    Create a one-time code for a phone number.

    Any previous unused code for the phone stops working. In development
    the response contains `debug_code`.

    Raises:
        HTTPException: 400 if the phone number is invalid.
        HTTPException: 429 if the client requests codes too often.
    """
    result = await manager.request_code(data.phone_number, include_debug_code=debug)

    if result.status == RequestOtpStatus.INVALID_PHONE or result.data is None:
        raise _validation_error("phone_number", INVALID_PHONE_MESSAGE)

    return RequestOtpResponse(
        phone_number=result.data.phone_number,
        expires_at=result.data.expires_at,
        max_verify_attempts=result.data.max_verify_attempts,
        debug_code=result.data.debug_code,
    )


@router.post(
    "/confirm-otp",
    response_model=ConfirmOtpResponse,
    summary="Confirm OTP and issue JWT",
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)
async def confirm_otp(
    data: ConfirmOtpRequest,
    manager: Annotated[OtpLifecycleManager, Depends(get_otp_manager)],
):
    """
    Verify the OTP for a phone number and return a JWT access token.

    **Outcomes:**
    - 200: token issued; the user is created on first login
    - 400: malformed input, no active code, expired code, or wrong code
      (with `remaining_attempts`)
    - 429: too many wrong attempts, a new code must be requested
    """
    result = await manager.confirm_code(data.phone_number, data.code)

    if result.status == ConfirmOtpStatus.SUCCESS and result.data is not None:
        return ConfirmOtpResponse(
            access_token=result.data.access_token,
            expires_at=result.data.expires_at,
            token_type="Bearer",
            user_id=result.data.user_id,
            phone_number=result.data.phone_number,
        )

    if result.status == ConfirmOtpStatus.INVALID_PHONE:
        raise _validation_error("phone_number", INVALID_PHONE_MESSAGE)

    if result.status == ConfirmOtpStatus.INVALID_CODE_FORMAT:
        raise _validation_error(
            "code",
            f"OTP code must contain exactly {manager.policy.code_length} digits.",
        )

    if result.status == ConfirmOtpStatus.OTP_NOT_FOUND:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "otp_not_found",
            "OTP code is missing or already consumed. Request a new code.",
        )

    if result.status == ConfirmOtpStatus.OTP_EXPIRED:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "otp_expired",
            "OTP code has expired. Request a new code.",
        )

    if result.status == ConfirmOtpStatus.OTP_BLOCKED:
        return _error(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "otp_blocked",
            "Too many OTP attempts. Request a new code.",
        )

    if result.status == ConfirmOtpStatus.INVALID_OTP:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ConfirmOtpErrorResponse(
                error_code="invalid_otp",
                remaining_attempts=result.remaining_attempts,
                message="Invalid OTP code.",
            ).model_dump(),
        )

    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
