# tests/conftest.py
import os

# Настройки должны быть в окружении до импорта app.core.config
os.environ.setdefault("DB__DB_HOST", "localhost")
os.environ.setdefault("DB__DB_NAME", "serenity_test")
os.environ.setdefault("DB__DB_USER", "serenity")
os.environ.setdefault("DB__DB_PASSWORD", "serenity")
os.environ.setdefault("SECURITY__JWT_SECRET_KEY", "test-secret-key-for-jwt-signing")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import timedelta

import pytest

from app.core.database import DatabaseHelper
from app.models import Base, User, Meditation, GroupSession
from app.models.base import utcnow
from app.services.group_session_service import GroupSessionService


@pytest.fixture
async def db():
    """Отдельная in-memory SQLite база на каждый тест"""
    helper = DatabaseHelper("sqlite+aiosqlite://", echo=False)
    async with helper.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield helper
    await helper.dispose()


@pytest.fixture
async def file_db(tmp_path):
    """Файловая SQLite с пулом соединений: у каждой сессии свое соединение"""
    helper = DatabaseHelper(f"sqlite+aiosqlite:///{tmp_path / 'serenity.db'}", echo=False)
    async with helper.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield helper
    await helper.dispose()


@pytest.fixture
async def session(db):
    async with db.session_factory() as s:
        yield s


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    async def factory(username: str = None, role: str = "user") -> User:
        counter["n"] += 1
        name = username or f"user{counter['n']}"
        user = User(
            username=name,
            email=f"{name}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(user)
        await session.commit()
        return user

    return factory


@pytest.fixture
async def meditation(session) -> Meditation:
    item = Meditation(title="Morning Calm", duration=10, type="guided", category="mindfulness", difficulty="beginner")
    session.add(item)
    await session.commit()
    return item


@pytest.fixture
def make_group(session, meditation):
    async def factory(host: User, max_participants: int = 2, **options) -> GroupSession:
        return await GroupSessionService(session).create_session(
            host.id,
            meditation.id,
            "Evening Sit",
            utcnow() + timedelta(hours=1),
            20,
            options={"max_participants": max_participants, **options},
        )

    return factory
