# app/repositories/analytics_repository.py
from typing import Optional, List, Dict, Any
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.meditation import SessionAnalytics

class SessionAnalyticsRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_session(self, session_id: int) -> Optional[SessionAnalytics]:
        stmt = select(SessionAnalytics).where(SessionAnalytics.session_id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, session_id: int, **fields) -> SessionAnalytics:
        """Создать или обновить проекцию для сессии"""
        record = await self.get_by_session(session_id)
        if record is None:
            record = SessionAnalytics(session_id=session_id, **fields)
            self.session.add(record)
        else:
            for key, value in fields.items():
                setattr(record, key, value)
        await self.session.flush()
        return record

    async def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count(SessionAnalytics.id)).where(SessionAnalytics.user_id == user_id)
        return (await self.session.execute(stmt)).scalar() or 0

    async def page_for_user(self, user_id: int, offset: int, limit: int) -> List[SessionAnalytics]:
        """Страница истории, сначала самые новые"""
        stmt = (
            select(SessionAnalytics)
            .where(SessionAnalytics.user_id == user_id)
            .order_by(SessionAnalytics.start_time.desc(), SessionAnalytics.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def aggregate_completed(self, user_id: int) -> Dict[str, Any]:
        """Агрегаты по завершенным сессиям пользователя"""
        stmt = select(
            func.count(SessionAnalytics.id).label("total_sessions"),
            func.coalesce(func.sum(SessionAnalytics.duration_completed), 0).label("total_minutes"),
            func.avg(SessionAnalytics.focus_score).label("average_focus_score"),
            func.coalesce(func.sum(SessionAnalytics.interruptions), 0).label("total_interruptions"),
        ).where(
            SessionAnalytics.user_id == user_id,
            SessionAnalytics.completed == True,  # noqa: E712
        )
        row = (await self.session.execute(stmt)).one()
        return dict(row._mapping)

    async def list_since(self, user_id: int, since: datetime) -> List[SessionAnalytics]:
        stmt = select(SessionAnalytics).where(
            SessionAnalytics.user_id == user_id,
            SessionAnalytics.start_time >= since,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
