# tests/test_meditation_sessions.py
import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.core.schemas.meditation import SessionComplete
from app.models.base import utcnow
from app.models import Meditation, User
from app.models.meditation import MeditationSession, SessionStatus
from app.repositories.analytics_repository import SessionAnalyticsRepository
from app.repositories.achievement_repository import AchievementRepository
from app.services.meditation_session_service import MeditationSessionService, default_focus_score


def test_default_focus_score():
    assert default_focus_score(0) == 10
    assert default_focus_score(3) == 7
    assert default_focus_score(15) == 0


async def test_only_one_active_session(session, make_user, meditation):
    user = await make_user()
    service = MeditationSessionService(session)
    await service.start_session(user.id, meditation.id, 10)

    with pytest.raises(ConflictError, match="Active session already exists"):
        await service.start_session(user.id, meditation.id, 10)


async def test_stale_active_check_is_caught_by_unique_index(session, make_user, meditation, monkeypatch):
    user = await make_user()
    user_id, meditation_id = user.id, meditation.id
    service = MeditationSessionService(session)
    first_id = (await service.start_session(user_id, meditation_id, 10)).id

    # Проверка get_active устарела: решает частичный уникальный индекс
    async def no_active(user_id):
        return None

    monkeypatch.setattr(service.repo, "get_active", no_active)
    with pytest.raises(ConflictError, match="Active session already exists"):
        await service.start_session(user_id, meditation_id, 10)

    active = (await session.execute(
        select(MeditationSession.id).where(
            MeditationSession.user_id == user_id,
            MeditationSession.status == SessionStatus.ACTIVE.value,
        )
    )).scalars().all()
    assert active == [first_id]

    # Завершенная сессия не мешает начать новую
    await service.abandon_session(first_id, user_id)
    assert (await service.start_session(user_id, meditation_id, 10)).status == SessionStatus.ACTIVE.value


async def test_concurrent_starts_leave_one_active_session(file_db):
    async with file_db.session_factory() as setup:
        user = User(username="racer", email="racer@example.com", password_hash="not-a-real-hash", role="user")
        item = Meditation(title="Quick Reset", duration=5, type="timer", category="breathing", difficulty="beginner")
        setup.add_all([user, item])
        await setup.commit()
        user_id, meditation_id = user.id, item.id

    async def start():
        async with file_db.session_factory() as s:
            return await MeditationSessionService(s).start_session(user_id, meditation_id, 5)

    results = await asyncio.gather(start(), start(), return_exceptions=True)

    started = [r for r in results if isinstance(r, MeditationSession)]
    rejected = [r for r in results if isinstance(r, ConflictError)]
    assert len(started) == 1
    assert len(rejected) == 1

    async with file_db.session_factory() as s:
        count = await s.scalar(
            select(func.count(MeditationSession.id)).where(
                MeditationSession.user_id == user_id,
                MeditationSession.status == SessionStatus.ACTIVE.value,
            )
        )
    assert count == 1


async def test_unknown_meditation(session, make_user):
    user = await make_user()
    with pytest.raises(NotFoundError):
        await MeditationSessionService(session).start_session(user.id, 999, 10)


async def test_complete_projects_analytics_and_achievements(session, make_user, meditation):
    user = await make_user()
    service = MeditationSessionService(session)
    started = await service.start_session(user.id, meditation.id, 10, mood_before="stressed")
    await service.record_interruption(started.id, user.id)
    await service.record_interruption(started.id, user.id)

    completed = await service.complete_session(
        started.id, user.id, SessionComplete(duration_completed=9, mood_after="calm"),
    )

    assert completed.status == SessionStatus.COMPLETED.value
    assert completed.completed
    assert completed.end_time is not None
    assert completed.mood_before == "stressed"

    analytics = await SessionAnalyticsRepository(session).get_by_session(started.id)
    assert analytics is not None
    assert analytics.focus_score == 8
    assert analytics.interruptions == 2
    assert analytics.duration_completed == 9
    assert analytics.maintained_streak is False

    beginner = await AchievementRepository(session).get(user.id, "beginner_meditator")
    assert beginner.completed
    mood = await AchievementRepository(session).get(user.id, "mood_lifter")
    assert mood.progress == 1


async def test_explicit_focus_score_wins(session, make_user, meditation):
    user = await make_user()
    service = MeditationSessionService(session)
    started = await service.start_session(user.id, meditation.id, 10)
    await service.complete_session(started.id, user.id, SessionComplete(duration_completed=10, focus_score=4.5))

    analytics = await SessionAnalyticsRepository(session).get_by_session(started.id)
    assert analytics.focus_score == 4.5


async def test_completing_twice_conflicts(session, make_user, meditation):
    user = await make_user()
    service = MeditationSessionService(session)
    started = await service.start_session(user.id, meditation.id, 10)
    await service.complete_session(started.id, user.id, SessionComplete(duration_completed=10))

    with pytest.raises(ConflictError, match="Session is already completed"):
        await service.complete_session(started.id, user.id, SessionComplete(duration_completed=10))


async def test_only_owner_can_complete(session, make_user, meditation):
    owner = await make_user()
    stranger = await make_user()
    service = MeditationSessionService(session)
    started = await service.start_session(owner.id, meditation.id, 10)

    with pytest.raises(AuthorizationError):
        await service.complete_session(started.id, stranger.id, SessionComplete(duration_completed=10))


async def test_unfinished_completion_does_not_advance_achievements(session, make_user, meditation):
    user = await make_user()
    service = MeditationSessionService(session)
    started = await service.start_session(user.id, meditation.id, 10)
    await service.complete_session(started.id, user.id, SessionComplete(duration_completed=2, completed=False))

    achievements = await AchievementRepository(session).list_for_user(user.id)
    assert all(a.progress == 0 for a in achievements)


async def test_maintained_streak_when_meditated_yesterday(session, make_user, meditation):
    user = await make_user()
    yesterday = utcnow() - timedelta(days=1)
    session.add(MeditationSession(
        user_id=user.id, meditation_id=meditation.id, start_time=yesterday, end_time=yesterday,
        duration=10, duration_completed=10, status=SessionStatus.COMPLETED.value, completed=True,
    ))
    await session.commit()

    service = MeditationSessionService(session)
    started = await service.start_session(user.id, meditation.id, 10)
    await service.complete_session(started.id, user.id, SessionComplete(duration_completed=10))

    analytics = await SessionAnalyticsRepository(session).get_by_session(started.id)
    assert analytics.maintained_streak is True


async def test_abandon_frees_the_active_slot(session, make_user, meditation):
    user = await make_user()
    service = MeditationSessionService(session)
    started = await service.start_session(user.id, meditation.id, 10)

    abandoned = await service.abandon_session(started.id, user.id)
    assert abandoned.status == SessionStatus.ABANDONED.value
    assert await service.get_active_session(user.id) is None

    again = await service.start_session(user.id, meditation.id, 15)
    assert (await service.get_active_session(user.id)).id == again.id
    assert len(await service.get_user_sessions(user.id)) == 2

    with pytest.raises(ConflictError):
        await service.record_interruption(started.id, user.id)
