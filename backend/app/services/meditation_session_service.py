# app/services/meditation_session_service.py
from typing import List, Optional
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.core.schemas.meditation import SessionComplete
from app.models.base import as_utc, utcnow
from app.models.group import GroupSession
from app.models.meditation import MeditationSession, SessionStatus
from app.repositories.meditation_repository import MeditationRepository, MeditationSessionRepository
from app.services.achievement_service import AchievementService
from app.services.session_analytics_service import SessionAnalyticsService
import logging

logger = logging.getLogger(__name__)


def default_focus_score(interruptions: int) -> float:
    """10 баллов минус по одному за каждое прерывание"""
    return float(max(0, 10 - (interruptions or 0)))


class MeditationSessionService:
    """
    Жизненный цикл персональной сессии: active -> completed | abandoned.
    Завершение в одной транзакции пишет сессию, аналитику и достижения.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = MeditationSessionRepository(session)
        self.meditations = MeditationRepository(session)
        self.analytics = SessionAnalyticsService(session)
        self.achievements = AchievementService(session)

    async def start_session(
        self, user_id: int, meditation_id: int, duration: int, mood_before: Optional[str] = None
    ) -> MeditationSession:
        meditation = await self.meditations.get(meditation_id)
        if not meditation or not meditation.is_active:
            raise NotFoundError("Meditation not found")

        if await self.repo.get_active(user_id):
            logger.warning(f"⚠️ User {user_id} tried to start a second active session")
            raise ConflictError("Active session already exists")

        try:
            record = await self.repo.create(
                user_id=user_id,
                meditation_id=meditation_id,
                duration=duration,
                mood_before=mood_before,
                status=SessionStatus.ACTIVE.value,
                start_time=utcnow(),
                interruptions=0,
                duration_completed=0,
                completed=False,
            )
            await self.session.commit()
        except IntegrityError:
            # Параллельный старт успел раньше: сработал uq_meditation_sessions_active_user
            await self.session.rollback()
            logger.warning(f"⚠️ Concurrent start rejected for user {user_id}")
            raise ConflictError("Active session already exists")
        logger.info(f"▶️ Session {record.id} started by user {user_id}")
        return record

    async def record_interruption(self, session_id: int, user_id: int) -> MeditationSession:
        record = await self._get_owned(session_id, user_id)
        if record.status != SessionStatus.ACTIVE.value:
            raise ConflictError("Session is not active")
        record.interruptions = (record.interruptions or 0) + 1
        await self.session.commit()
        return record

    async def complete_session(self, session_id: int, user_id: int, data: SessionComplete) -> MeditationSession:
        record = await self._get_owned(session_id, user_id)
        if record.status != SessionStatus.ACTIVE.value:
            raise ConflictError("Session is already completed")

        record.status = SessionStatus.COMPLETED.value
        record.end_time = utcnow()
        record.duration_completed = data.duration_completed
        record.completed = data.completed
        if data.mood_before is not None:
            record.mood_before = data.mood_before.value
        if data.mood_after is not None:
            record.mood_after = data.mood_after.value
        if data.notes is not None:
            record.notes = data.notes
        await self.session.flush()

        focus_score = data.focus_score if data.focus_score is not None else default_focus_score(record.interruptions)
        await self._project(record, focus_score)
        await self.session.commit()
        logger.info(f"✅ Session {record.id} completed by user {user_id}")
        return record

    async def abandon_session(self, session_id: int, user_id: int) -> MeditationSession:
        record = await self._get_owned(session_id, user_id)
        if record.status != SessionStatus.ACTIVE.value:
            raise ConflictError("Session is not active")
        record.status = SessionStatus.ABANDONED.value
        record.end_time = utcnow()
        await self.session.commit()
        logger.info(f"⏹️ Session {record.id} abandoned by user {user_id}")
        return record

    async def get_active_session(self, user_id: int) -> Optional[MeditationSession]:
        return await self.repo.get_active(user_id)

    async def get_user_sessions(self, user_id: int, limit: int = 10) -> List[MeditationSession]:
        return await self.repo.list_for_user(user_id, limit=limit)

    async def record_group_completion(
        self,
        user_id: int,
        group: GroupSession,
        duration_completed: int,
        mood_before: Optional[str] = None,
        mood_after: Optional[str] = None,
    ) -> MeditationSession:
        """Персональная запись об участии в групповой сессии. Без commit"""
        now = utcnow()
        record = await self.repo.create(
            user_id=user_id,
            meditation_id=group.meditation_id,
            group_session_id=group.id,
            start_time=as_utc(group.started_at) or now,
            end_time=now,
            duration=group.duration,
            duration_completed=duration_completed,
            status=SessionStatus.COMPLETED.value,
            completed=True,
            interruptions=0,
            mood_before=mood_before,
            mood_after=mood_after,
        )
        await self._project(record, default_focus_score(0))
        return record

    # === ВНУТРЕННЕЕ ===

    async def _get_owned(self, session_id: int, user_id: int) -> MeditationSession:
        record = await self.repo.get(session_id)
        if not record:
            raise NotFoundError("Session not found")
        if record.user_id != user_id:
            raise AuthorizationError("Not authorized to modify this session")
        return record

    async def _project(self, record: MeditationSession, focus_score: float) -> None:
        """Аналитика и достижения для только что завершенной сессии"""
        maintained_streak = False
        if record.completed:
            maintained_streak = await self._had_session_previous_day(record)
        await self.analytics.record_session(
            record,
            focus_score=focus_score,
            maintained_streak=maintained_streak,
            notes=record.notes,
        )
        await self.achievements.process_session(record)

    async def _had_session_previous_day(self, record: MeditationSession) -> bool:
        day = as_utc(record.start_time).date()
        day_start = datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)
        previous = await self.repo.completed_start_times(
            record.user_id, since=day_start - timedelta(days=1), until=day_start
        )
        return bool(previous)
