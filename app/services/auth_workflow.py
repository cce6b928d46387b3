"""
Auth Workflow

OTP lifecycle: request a code for a phone number, then confirm it to
obtain an access token.

Every outcome the caller can act on is returned as a status value.
Storage and entropy failures are not domain outcomes and propagate
unchanged to the caller.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from app.core.config import OtpPolicy
from app.core.security import AccessToken, create_access_token
from app.models.enums import ConfirmOtpStatus, RequestOtpStatus
from app.models.otp_code import OTPCode
from app.services.otp_service import (
    generate_otp,
    hash_otp,
    is_code_format_valid,
    is_phone_valid,
    mask_phone,
    normalize_phone,
    verify_otp_hash,
)
from app.services.otp_store import ChallengeState, ChallengeStore


logger = logging.getLogger(__name__)

TokenIssuer = Callable[[uuid.UUID, str], AccessToken]
CodeGenerator = Callable[[int], str]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============== Results ==============

@dataclass(frozen=True)
class RequestOtpData:
    phone_number: str
    expires_at: datetime
    max_verify_attempts: int
    debug_code: Optional[str] = None


@dataclass(frozen=True)
class RequestOtpResult:
    status: RequestOtpStatus
    data: Optional[RequestOtpData] = None


@dataclass(frozen=True)
class ConfirmOtpData:
    access_token: str
    expires_at: datetime
    user_id: uuid.UUID
    phone_number: str


@dataclass(frozen=True)
class ConfirmOtpResult:
    status: ConfirmOtpStatus
    data: Optional[ConfirmOtpData] = None
    remaining_attempts: int = 0


@dataclass(frozen=True)
class ChallengeTransition:
    """New challenge state plus the outcome it produces."""
    state: ChallengeState
    status: ConfirmOtpStatus
    remaining_attempts: int = 0


# ============== State Transition ==============

def _as_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def transition_challenge(
    challenge: OTPCode,
    code: str,
    now: datetime,
    policy: OtpPolicy,
) -> ChallengeTransition:
    """
    Decide what a confirmation attempt does to an active challenge.

    Order of checks:
    1. Expired (expires_at <= now) -> used, OTP_EXPIRED.
    2. Already at the attempt ceiling -> used, OTP_BLOCKED.
    3. Wrong code -> one more failed attempt; reaching the ceiling marks
       the challenge used (OTP_BLOCKED), otherwise INVALID_OTP with the
       remaining attempts.
    4. Correct code -> used, SUCCESS.

    Pure function: the caller persists the returned state.
    """
    attempts = challenge.failed_attempts
    ceiling = policy.max_verify_attempts

    if _as_utc(challenge.expires_at) <= now:
        return ChallengeTransition(ChallengeState(attempts, True), ConfirmOtpStatus.OTP_EXPIRED)

    if attempts >= ceiling:
        return ChallengeTransition(ChallengeState(attempts, True), ConfirmOtpStatus.OTP_BLOCKED)

    if not verify_otp_hash(code, challenge.code_hash):
        attempts += 1
        if attempts >= ceiling:
            return ChallengeTransition(ChallengeState(attempts, True), ConfirmOtpStatus.OTP_BLOCKED)
        return ChallengeTransition(
            ChallengeState(attempts, False),
            ConfirmOtpStatus.INVALID_OTP,
            remaining_attempts=max(0, ceiling - attempts),
        )

    return ChallengeTransition(ChallengeState(attempts, True), ConfirmOtpStatus.SUCCESS)


# ============== Lifecycle Manager ==============

class OtpLifecycleManager:
    """
    Owns the OTP state machine for phone numbers.

    A challenge is Active from creation until it is consumed by success,
    expiry, attempt exhaustion or a newer request; Used is terminal.

    Concurrency caveats (not guarded here):
    - Two concurrent requests for one phone can both insert a challenge;
      confirmation always picks the newest.
    - Two concurrent wrong confirmations can both read the same attempt
      count, overshooting the ceiling by one.
    Used challenges are never purged by this class.
    """

    def __init__(
        self,
        store: ChallengeStore,
        policy: OtpPolicy,
        token_issuer: TokenIssuer = create_access_token,
        code_generator: CodeGenerator = generate_otp,
        clock: Clock = utc_now,
    ):
        self._store = store
        self._policy = policy
        self._token_issuer = token_issuer
        self._code_generator = code_generator
        self._clock = clock

    @property
    def policy(self) -> OtpPolicy:
        return self._policy

    async def request_code(
        self,
        raw_phone_number: str,
        include_debug_code: bool = False,
    ) -> RequestOtpResult:
        """
        Issue a new OTP challenge for a phone number.

        Every unused challenge for the phone is marked used in the same
        commit that inserts the new one.

        Args:
            raw_phone_number: Phone number as typed by the user.
            include_debug_code: Return the plaintext code (development only).

        Returns:
            RequestOtpResult: INVALID_PHONE, or SUCCESS with expiry data.
        """
        phone_number = normalize_phone(raw_phone_number)
        if not is_phone_valid(phone_number):
            return RequestOtpResult(RequestOtpStatus.INVALID_PHONE)

        now = self._clock()

        active_codes = await self._store.find_unused_by_phone(phone_number)
        for active_code in active_codes:
            await self._store.apply_state(
                active_code,
                ChallengeState(active_code.failed_attempts, True),
            )

        plain_code = self._code_generator(self._policy.code_length)

        challenge = OTPCode(
            id=uuid.uuid4(),
            phone_number=phone_number,
            code_hash=hash_otp(plain_code),
            expires_at=now + self._policy.ttl,
            failed_attempts=0,
            is_used=False,
            created_at=now,
        )

        await self._store.insert(challenge)
        await self._store.commit()

        logger.info(
            f"OTP issued for {mask_phone(phone_number)}, superseded {len(active_codes)} active code(s)"
        )

        return RequestOtpResult(
            RequestOtpStatus.SUCCESS,
            RequestOtpData(
                phone_number=phone_number,
                expires_at=challenge.expires_at,
                max_verify_attempts=self._policy.max_verify_attempts,
                debug_code=plain_code if include_debug_code else None,
            ),
        )

    async def confirm_code(self, raw_phone_number: str, raw_code: str) -> ConfirmOtpResult:
        """
        Verify a code against the newest active challenge for a phone.

        On success the user for the phone is found or created and an
        access token is issued; all writes are committed together.

        Args:
            raw_phone_number: Phone number as typed by the user.
            raw_code: Code as typed by the user.

        Returns:
            ConfirmOtpResult: The outcome, with token data on SUCCESS and
            the remaining attempts on INVALID_OTP.
        """
        phone_number = normalize_phone(raw_phone_number)
        if not is_phone_valid(phone_number):
            return ConfirmOtpResult(ConfirmOtpStatus.INVALID_PHONE)

        if not is_code_format_valid(raw_code, self._policy.code_length):
            return ConfirmOtpResult(ConfirmOtpStatus.INVALID_CODE_FORMAT)

        now = self._clock()
        masked = mask_phone(phone_number)

        challenge = await self._store.find_latest_unused_by_phone(phone_number)
        if challenge is None:
            return await self._no_active_challenge(phone_number)

        transition = transition_challenge(challenge, raw_code, now, self._policy)
        await self._store.apply_state(challenge, transition.state)

        if transition.status != ConfirmOtpStatus.SUCCESS:
            await self._store.commit()
            if transition.status == ConfirmOtpStatus.INVALID_OTP:
                logger.info(f"Wrong OTP for {masked}, {transition.remaining_attempts} attempt(s) left")
            else:
                logger.warning(f"OTP for {masked} consumed: {transition.status.value}")
            return ConfirmOtpResult(
                transition.status,
                remaining_attempts=transition.remaining_attempts,
            )

        user = await self._store.find_or_create_user(phone_number, now)
        token = self._token_issuer(user.id, phone_number)

        await self._store.commit()

        logger.info(f"OTP confirmed for {masked}, user {user.id}")

        return ConfirmOtpResult(
            ConfirmOtpStatus.SUCCESS,
            ConfirmOtpData(
                access_token=token.access_token,
                expires_at=token.expires_at,
                user_id=user.id,
                phone_number=phone_number,
            ),
        )

    async def _no_active_challenge(self, phone_number: str) -> ConfirmOtpResult:
        # A challenge exhausted by wrong guesses keeps answering OTP_BLOCKED
        # until a new code is requested; nothing is written.
        latest = await self._store.find_latest_by_phone(phone_number)
        if latest is not None and latest.failed_attempts >= self._policy.max_verify_attempts:
            return ConfirmOtpResult(ConfirmOtpStatus.OTP_BLOCKED)
        return ConfirmOtpResult(ConfirmOtpStatus.OTP_NOT_FOUND)
