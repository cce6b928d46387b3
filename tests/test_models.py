"""
Model Tests

Relationship configuration and database-side cascades.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.models import QrCodeRecord, TelegramBinding, User


class TestUserRelationships:
    """Tests for User relationship loading and deletion."""

    @pytest.mark.parametrize("name", ["qr_code_records", "telegram_binding"])
    def test_children_deleted_by_foreign_key(self, name):
        prop = getattr(User, name).property

        assert prop.lazy == "select"
        assert prop.passive_deletes is True

    @pytest.mark.asyncio
    async def test_deleting_user_removes_children(self, sqlite_url):
        engine = create_async_engine(sqlite_url, poolclass=NullPool)

        @event.listens_for(engine.sync_engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        session_maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
        now = datetime.now(timezone.utc)
        user = User(id=uuid.uuid4(), phone_number="79991234567", created_at=now)

        async with session_maker() as session:
            session.add(user)
            await session.flush()
            session.add_all([
                QrCodeRecord(
                    id=uuid.uuid4(),
                    user_id=user.id,
                    check_in_at=now + timedelta(days=1),
                    check_out_at=now + timedelta(days=2),
                    guests_count=1,
                    door_password="4821",
                    payload_json="{}",
                    qr_image_base64="",
                    data_type="booking_access",
                    created_at=now,
                ),
                TelegramBinding(id=uuid.uuid4(), user_id=user.id, chat_id=555, created_at=now),
            ])
            await session.commit()

        async with session_maker() as session:
            stored = await session.get(User, user.id)
            await session.delete(stored)
            await session.commit()

            assert await session.scalar(select(func.count()).select_from(QrCodeRecord)) == 0
            assert await session.scalar(select(func.count()).select_from(TelegramBinding)) == 0

        await engine.dispose()
