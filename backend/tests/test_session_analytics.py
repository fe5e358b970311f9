# tests/test_session_analytics.py
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ValidationError
from app.models.meditation import MeditationSession, SessionStatus
from app.services.session_analytics_service import SessionAnalyticsService


async def record(session, service, user, start_time, *, completed=True, duration_completed=10,
                 focus_score=8.0, interruptions=0, mood_before=None, mood_after=None):
    item = MeditationSession(
        user_id=user.id,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=duration_completed),
        duration=10,
        duration_completed=duration_completed,
        status=SessionStatus.COMPLETED.value,
        completed=completed,
        interruptions=interruptions,
        mood_before=mood_before,
        mood_after=mood_after,
    )
    session.add(item)
    await session.flush()
    return await service.record_session(item, focus_score=focus_score)


async def test_mood_improvement_all_sessions_improved(session, make_user):
    user = await make_user()
    service = SessionAnalyticsService(session)
    start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    await record(session, service, user, start, mood_before="anxious", mood_after="peaceful")
    await record(session, service, user, start + timedelta(days=1), mood_before="anxious", mood_after="peaceful")
    await session.commit()

    stats = await service.get_mood_improvement_stats(user.id, datetime(2026, 1, 1, tzinfo=timezone.utc))

    assert stats == {"total_sessions": 2, "total_improved": 2, "improvement_rate": 100}


async def test_mood_improvement_respects_since_and_empty_history(session, make_user):
    user = await make_user()
    service = SessionAnalyticsService(session)
    start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    await record(session, service, user, start, mood_before="calm", mood_after="stressed")
    await record(session, service, user, start + timedelta(days=2), mood_before="neutral", mood_after="calm")

    stats = await service.get_mood_improvement_stats(user.id, start + timedelta(days=1))
    assert stats["total_sessions"] == 1
    assert stats["improvement_rate"] == 100

    all_time = await service.get_mood_improvement_stats(user.id)
    assert all_time["total_sessions"] == 2
    assert all_time["improvement_rate"] == 50

    other = await make_user()
    assert (await service.get_mood_improvement_stats(other.id))["improvement_rate"] == 0


async def test_history_is_paginated_newest_first(session, make_user):
    user = await make_user()
    service = SessionAnalyticsService(session)
    start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    for i in range(3):
        await record(session, service, user, start + timedelta(days=i))

    first = await service.get_user_session_history(user.id, page=1, limit=2)
    second = await service.get_user_session_history(user.id, page=2, limit=2)

    assert first["total_sessions"] == 3
    assert first["total_pages"] == 2
    assert [r.start_time.day for r in first["sessions"]] == [3, 2]
    assert [r.start_time.day for r in second["sessions"]] == [1]


async def test_history_rejects_bad_paging(session, make_user):
    user = await make_user()
    service = SessionAnalyticsService(session)
    with pytest.raises(ValidationError):
        await service.get_user_session_history(user.id, page=0)
    with pytest.raises(ValidationError):
        await service.get_user_session_history(user.id, limit=0)


async def test_stats_cover_completed_sessions_only(session, make_user):
    user = await make_user()
    service = SessionAnalyticsService(session)
    start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    await record(session, service, user, start, duration_completed=10, focus_score=8.0, interruptions=1)
    await record(session, service, user, start + timedelta(days=1), duration_completed=20, focus_score=6.0, interruptions=2)
    await record(session, service, user, start + timedelta(days=2), completed=False, duration_completed=3,
                 focus_score=1.0, interruptions=5)

    stats = await service.get_user_stats(user.id)

    assert stats == {
        "total_sessions": 2,
        "total_minutes": 30,
        "average_focus_score": 7.0,
        "total_interruptions": 3,
    }


async def test_stats_for_new_user(session, make_user):
    user = await make_user()
    stats = await SessionAnalyticsService(session).get_user_stats(user.id)
    assert stats == {"total_sessions": 0, "total_minutes": 0, "average_focus_score": 0.0, "total_interruptions": 0}


async def test_record_session_upserts_by_session(session, make_user):
    user = await make_user()
    service = SessionAnalyticsService(session)
    start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    first = await record(session, service, user, start, focus_score=5.0)

    item = await session.get(MeditationSession, first.session_id)
    second = await service.record_session(item, focus_score=9.0)

    assert second.id == first.id
    assert second.focus_score == 9.0
    assert (await service.get_user_session_history(user.id))["total_sessions"] == 1
