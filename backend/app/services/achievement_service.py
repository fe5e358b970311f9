# app/services/achievement_service.py
from typing import List, Optional, Sequence
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.base import as_utc
from app.models.engagement import Achievement
from app.models.meditation import MeditationSession, SessionStatus
from app.repositories.achievement_repository import AchievementRepository
from app.repositories.meditation_repository import MeditationSessionRepository
from app.repositories.friend_repository import FriendRepository
from app.services.achievement_rules import (
    AchievementRule,
    CounterRule,
    SessionFacts,
    DEFAULT_CATALOGUE,
    catalogue_index,
    consecutive_days,
    longest_streak_target,
)
import logging

logger = logging.getLogger(__name__)


class AchievementService:
    """
    Движок достижений. Методы только делают flush - транзакцией владеет
    вызывающий сервис (завершение сессии, регистрация, дружба).
    """

    def __init__(self, session: AsyncSession, catalogue: Sequence[AchievementRule] = DEFAULT_CATALOGUE):
        self.session = session
        self.catalogue = tuple(catalogue)
        self.rules = catalogue_index(self.catalogue)
        self.achievements = AchievementRepository(session)
        self.sessions = MeditationSessionRepository(session)

    async def initialize_achievements(self, user_id: int) -> None:
        """Создает недостающие записи каталога; существующие не трогает"""
        existing = await self.achievements.existing_types(user_id)
        missing = [
            Achievement(
                user_id=user_id,
                type=rule.type,
                title=rule.title,
                description=rule.description,
                points=rule.points,
                progress=0,
                target=rule.target,
                completed=False,
                completed_at=None,
            )
            for rule in self.catalogue
            if rule.type not in existing
        ]
        if missing:
            await self.achievements.add_many(missing)

    async def process_session(self, session: MeditationSession) -> List[str]:
        """Применяет правила каталога к завершенной сессии; возвращает новые разблокированные типы"""
        if not session.completed or session.status != SessionStatus.COMPLETED.value:
            return []

        await self.initialize_achievements(session.user_id)
        facts = await self._collect_facts(session)
        current = {a.type: a for a in await self.achievements.list_for_user(session.user_id)}

        unlocked = []
        for rule in self.catalogue:
            achievement = current.get(rule.type)
            if achievement is None:
                continue
            new_progress = rule.next_progress(achievement.progress, facts)
            if new_progress is not None and self._apply_progress(achievement, rule, new_progress):
                unlocked.append(rule.type)

        await self.session.flush()
        if unlocked:
            logger.info(f"🏆 User {session.user_id} unlocked achievements: {', '.join(unlocked)}")
        return unlocked

    async def process_group_participation(self, user_id: int) -> bool:
        return await self._increment_counter(user_id, "group_participation")

    async def process_group_hosted(self, host_id: int) -> bool:
        return await self._increment_counter(host_id, "group_hosted")

    async def process_friendships(self, user_id: int) -> bool:
        """Прогресс social_butterfly = текущее число друзей"""
        friend_count = await FriendRepository(self.session).count_friends(user_id)
        unlocked = False
        for rule in self._counter_rules("friends"):
            achievement = await self._get_or_init(user_id, rule.type)
            unlocked |= self._apply_progress(achievement, rule, friend_count)
        await self.session.flush()
        return unlocked

    async def get_user_points(self, user_id: int) -> int:
        """Сумма очков по всем завершенным достижениям"""
        completed = await self.achievements.completed_types(user_id)
        return sum(self.rules[t].points for t in completed if t in self.rules)

    async def get_user_achievements(self, user_id: int) -> List[Achievement]:
        return await self.achievements.list_for_user(user_id)

    # === ВНУТРЕННЕЕ ===

    def _apply_progress(self, achievement: Achievement, rule: AchievementRule, new_progress: int) -> bool:
        """Обновляет прогресс; True если достижение только что завершено"""
        if achievement.completed:
            return False
        new_progress = max(0, min(rule.target, new_progress))
        if new_progress == achievement.progress:
            return False
        achievement.progress = new_progress
        if new_progress >= achievement.target:
            achievement.completed = True
            achievement.completed_at = datetime.now(timezone.utc)
            return True
        return False

    def _counter_rules(self, event: str) -> List[CounterRule]:
        return [r for r in self.catalogue if isinstance(r, CounterRule) and r.event == event]

    async def _get_or_init(self, user_id: int, type: str) -> Optional[Achievement]:
        achievement = await self.achievements.get(user_id, type)
        if achievement is None:
            await self.initialize_achievements(user_id)
            achievement = await self.achievements.get(user_id, type)
        return achievement

    async def _increment_counter(self, user_id: int, event: str) -> bool:
        unlocked = False
        for rule in self._counter_rules(event):
            achievement = await self._get_or_init(user_id, rule.type)
            unlocked |= self._apply_progress(achievement, rule, achievement.progress + 1)
        await self.session.flush()
        return unlocked

    async def _collect_facts(self, session: MeditationSession) -> SessionFacts:
        start_time = as_utc(session.start_time)
        session_day = start_time.date()
        window_start = datetime.combine(
            session_day - timedelta(days=longest_streak_target(self.catalogue)),
            datetime.min.time(),
            tzinfo=timezone.utc,
        )
        window_end = datetime.combine(session_day + timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc)

        start_times = await self.sessions.completed_start_times(session.user_id, window_start, window_end)
        days = {as_utc(t).date() for t in start_times}
        days.add(session_day)

        return SessionFacts(
            user_id=session.user_id,
            start_time=start_time,
            duration=session.duration or 0,
            duration_completed=session.duration_completed or 0,
            mood_before=session.mood_before,
            mood_after=session.mood_after,
            completed_sessions=await self.sessions.count_completed(session.user_id),
            streak_days=consecutive_days(days, session_day),
        )
