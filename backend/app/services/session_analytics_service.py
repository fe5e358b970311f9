# app/services/session_analytics_service.py
from typing import Optional, Dict, Any
from datetime import datetime, timezone
import math
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import ValidationError
from app.models.base import as_utc
from app.models.meditation import MeditationSession, SessionAnalytics, is_mood_improved
from app.repositories.analytics_repository import SessionAnalyticsRepository
import logging

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class SessionAnalyticsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = SessionAnalyticsRepository(session)

    async def record_session(
        self,
        meditation_session: MeditationSession,
        focus_score: Optional[float] = None,
        maintained_streak: bool = False,
        notes: Optional[str] = None,
    ) -> SessionAnalytics:
        """Проекция завершенной сессии в аналитику. Без commit - это делает вызывающий"""
        record = await self.repo.upsert(
            meditation_session.id,
            user_id=meditation_session.user_id,
            meditation_id=meditation_session.meditation_id,
            start_time=meditation_session.start_time,
            end_time=meditation_session.end_time,
            duration=meditation_session.duration,
            duration_completed=meditation_session.duration_completed or 0,
            completed=bool(meditation_session.completed),
            mood_before=meditation_session.mood_before,
            mood_after=meditation_session.mood_after,
            interruptions=meditation_session.interruptions or 0,
            focus_score=focus_score,
            maintained_streak=maintained_streak,
            notes=notes if notes is not None else meditation_session.notes,
        )
        logger.info(f"📊 Analytics recorded for session {meditation_session.id}")
        return record

    async def get_user_session_history(self, user_id: int, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Постраничная история, сначала самые новые"""
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        total = await self.repo.count_for_user(user_id)
        sessions = await self.repo.page_for_user(user_id, offset=(page - 1) * limit, limit=limit)
        return {
            "sessions": sessions,
            "total_pages": math.ceil(total / limit),
            "total_sessions": total,
        }

    async def get_user_stats(self, user_id: int) -> Dict[str, Any]:
        """Агрегаты по завершенным сессиям"""
        row = await self.repo.aggregate_completed(user_id)
        average = row["average_focus_score"]
        return {
            "total_sessions": int(row["total_sessions"] or 0),
            "total_minutes": int(row["total_minutes"] or 0),
            "average_focus_score": round(float(average), 2) if average is not None else 0.0,
            "total_interruptions": int(row["total_interruptions"] or 0),
        }

    async def get_mood_improvement_stats(self, user_id: int, since: Optional[datetime] = None) -> Dict[str, Any]:
        """Доля сессий с улучшением настроения начиная с since"""
        if since is None:
            since = datetime.fromtimestamp(0, tz=timezone.utc)
        since = as_utc(since).astimezone(timezone.utc)

        records = await self.repo.list_since(user_id, since)
        total = len(records)
        improved = sum(1 for r in records if is_mood_improved(r.mood_before, r.mood_after))
        return {
            "total_sessions": total,
            "total_improved": improved,
            "improvement_rate": (improved / total * 100) if total else 0.0,
        }
