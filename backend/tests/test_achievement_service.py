# tests/test_achievement_service.py
from datetime import datetime, timedelta, timezone

from app.models.engagement import Achievement
from app.models.meditation import MeditationSession, SessionStatus
from app.repositories.achievement_repository import AchievementRepository
from app.services.achievement_rules import DEFAULT_CATALOGUE
from app.services.achievement_service import AchievementService


async def add_session(session, user, start_time, *, completed=True, status=SessionStatus.COMPLETED.value,
                      duration=10, duration_completed=None, mood_before=None, mood_after=None):
    record = MeditationSession(
        user_id=user.id,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=duration),
        duration=duration,
        duration_completed=duration if duration_completed is None else duration_completed,
        status=status,
        completed=completed,
        interruptions=0,
        mood_before=mood_before,
        mood_after=mood_after,
    )
    session.add(record)
    await session.flush()
    return record


async def by_type(session, user):
    return {a.type: a for a in await AchievementRepository(session).list_for_user(user.id)}


async def test_initialize_is_idempotent(session, make_user):
    user = await make_user()
    service = AchievementService(session)

    await service.initialize_achievements(user.id)
    await service.initialize_achievements(user.id)
    await session.commit()

    achievements = await AchievementRepository(session).list_for_user(user.id)
    assert len(achievements) == len(DEFAULT_CATALOGUE)
    assert len({a.type for a in achievements}) == len(DEFAULT_CATALOGUE)
    assert all(a.progress == 0 and not a.completed for a in achievements)


async def test_initialize_does_not_reset_progress(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    session.add(Achievement(user_id=user.id, type="mood_lifter", title="Mood Lifter",
                            points=200, progress=4, target=10, completed=False))
    await session.flush()

    await service.initialize_achievements(user.id)

    current = await by_type(session, user)
    assert current["mood_lifter"].progress == 4
    assert len(current) == len(DEFAULT_CATALOGUE)


async def test_points_are_zero_without_completed_achievements(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    await service.initialize_achievements(user.id)
    assert await service.get_user_points(user.id) == 0


async def test_incomplete_session_changes_nothing(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    await service.initialize_achievements(user.id)
    before = {t: (a.progress, a.completed) for t, a in (await by_type(session, user)).items()}

    start = datetime(2026, 3, 10, 6, 0, tzinfo=timezone.utc)
    unfinished = await add_session(session, user, start, completed=False)
    abandoned = await add_session(session, user, start, completed=True, status=SessionStatus.ABANDONED.value)

    assert await service.process_session(unfinished) == []
    assert await service.process_session(abandoned) == []

    after = {t: (a.progress, a.completed) for t, a in (await by_type(session, user)).items()}
    assert after == before


async def test_early_morning_first_session_unlocks_and_scores(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    record = await add_session(session, user, datetime(2026, 3, 10, 6, 15, tzinfo=timezone.utc))

    unlocked = await service.process_session(record)
    await session.commit()

    assert set(unlocked) == {"early_bird", "beginner_meditator"}
    current = await by_type(session, user)
    assert current["early_bird"].completed and current["early_bird"].completed_at is not None
    assert current["week_warrior"].progress == 1
    assert not current["night_owl"].completed
    assert await service.get_user_points(user.id) == 110


async def test_marathon_and_mood_lifter(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    record = await add_session(
        session, user, datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc),
        duration=45, duration_completed=40, mood_before="anxious", mood_after="calm",
    )

    unlocked = await service.process_session(record)

    assert "marathon_meditator" in unlocked
    current = await by_type(session, user)
    assert current["mood_lifter"].progress == 1
    assert not current["mood_lifter"].completed


async def test_week_streak_completes_on_seventh_day(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    first_day = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    records = [await add_session(session, user, first_day + timedelta(days=i)) for i in range(7)]

    await service.process_session(records[5])
    assert (await by_type(session, user))["week_warrior"].progress == 6

    unlocked = await service.process_session(records[6])
    current = await by_type(session, user)
    assert "week_warrior" in unlocked
    assert current["week_warrior"].completed
    assert current["week_warrior"].progress == 7
    assert current["mindful_month"].progress == 7


async def test_gap_resets_streak_progress(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    day = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    for i in range(3):
        await add_session(session, user, day + timedelta(days=i))
    await service.process_session(await add_session(session, user, day + timedelta(days=2, hours=2)))
    assert (await by_type(session, user))["week_warrior"].progress == 3

    later = await add_session(session, user, day + timedelta(days=5))
    await service.process_session(later)
    assert (await by_type(session, user))["week_warrior"].progress == 1


async def test_progress_never_exceeds_target_and_completion_is_sticky(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    start = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
    for i in range(3):
        record = await add_session(session, user, start + timedelta(minutes=i * 20), duration=35)
        await service.process_session(record)

    marathon = (await by_type(session, user))["marathon_meditator"]
    assert marathon.progress == marathon.target == 1
    assert marathon.completed


async def test_group_counters(session, make_user):
    user = await make_user()
    service = AchievementService(session)

    for _ in range(12):
        await service.process_group_participation(user.id)
    assert await service.process_group_hosted(user.id) is False

    current = await by_type(session, user)
    assert current["community_pillar"].progress == 10
    assert current["community_pillar"].completed
    assert current["group_guide"].progress == 1
    assert await service.get_user_points(user.id) == 300


async def test_user_achievements_report_percentage(session, make_user):
    user = await make_user()
    service = AchievementService(session)
    for _ in range(5):
        await service.process_group_participation(user.id)

    pillar = next(a for a in await service.get_user_achievements(user.id) if a.type == "community_pillar")
    assert pillar.progress_percentage == 50
