"""
Pytest Configuration and Fixtures

Provides reusable fixtures for testing the iLocks QR Backend.
"""

import os

# Settings are read at import time; configure them before any app import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token")

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import OtpPolicy
from app.models import Base, OTPCode, User
from app.services.otp_store import ChallengeState


# ==================== Clock Fixtures ====================

class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def otp_policy() -> OtpPolicy:
    return OtpPolicy(code_length=6, ttl=timedelta(minutes=5), max_verify_attempts=5)


# ==================== Challenge Store Fixtures ====================

class InMemoryChallengeStore:
    """
    ChallengeStore keeping challenges and users in lists.

    Writes are staged until commit(), mirroring a database session.
    """

    def __init__(self):
        self.challenges: list[OTPCode] = []
        self.users: dict[str, User] = {}
        self.commits = 0
        self._pending_challenges: list[OTPCode] = []
        self._pending_users: dict[str, User] = {}
        self._pending_states: list[tuple[OTPCode, ChallengeState]] = []

    async def find_unused_by_phone(self, phone_number):
        return [c for c in self.challenges if c.phone_number == phone_number and not c.is_used]

    async def find_latest_unused_by_phone(self, phone_number):
        active = await self.find_unused_by_phone(phone_number)
        return max(active, key=lambda c: c.created_at, default=None)

    async def find_latest_by_phone(self, phone_number):
        rows = [c for c in self.challenges if c.phone_number == phone_number]
        return max(rows, key=lambda c: c.created_at, default=None)

    async def insert(self, challenge):
        self._pending_challenges.append(challenge)

    async def apply_state(self, challenge, state):
        self._pending_states.append((challenge, state))

    async def find_or_create_user(self, phone_number, now):
        user = self.users.get(phone_number) or self._pending_users.get(phone_number)
        if user is None:
            user = User(id=uuid.uuid4(), phone_number=phone_number, created_at=now)
            self._pending_users[phone_number] = user
        return user

    async def commit(self):
        for challenge, state in self._pending_states:
            challenge.failed_attempts = state.failed_attempts
            challenge.is_used = state.is_used
        self.challenges.extend(self._pending_challenges)
        self.users.update(self._pending_users)
        self._pending_states.clear()
        self._pending_challenges.clear()
        self._pending_users.clear()
        self.commits += 1


@pytest.fixture
def challenge_store() -> InMemoryChallengeStore:
    return InMemoryChallengeStore()


# ==================== Database Fixtures ====================

@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """
    File-backed SQLite database with all tables created.

    NullPool keeps connections from outliving the event loop that opened
    them, so one URL serves both pytest-asyncio and TestClient loops.
    """
    path = tmp_path / "test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_maker(sqlite_url) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(sqlite_url, poolclass=NullPool)
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def db_user(db_session) -> User:
    user = User(id=uuid.uuid4(), phone_number="79991234567", created_at=datetime.now(timezone.utc))
    db_session.add(user)
    await db_session.commit()
    return user


# ==================== HTTP Client Fixtures ====================

@pytest.fixture
def mock_httpx_response():
    """
    Factory fixture to create mock httpx responses.

    Usage:
        response = mock_httpx_response(status_code=200, json_data={"ok": True})
    """
    def _create_response(status_code: int = 200, json_data: dict = None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data if json_data is not None else {}
        response.text = text
        return response
    return _create_response


# ==================== Booking Fixtures ====================

@pytest.fixture
def booking_window() -> tuple[datetime, datetime]:
    check_in = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=1)
    return check_in, check_in + timedelta(days=2)
