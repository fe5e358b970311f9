# app/repositories/meditation_repository.py
from typing import Optional, List
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.meditation import Meditation, MeditationSession, SessionStatus

class MeditationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **fields) -> Meditation:
        meditation = Meditation(**fields)
        self.session.add(meditation)
        await self.session.flush()
        return meditation

    async def get(self, meditation_id: int) -> Optional[Meditation]:
        return await self.session.get(Meditation, meditation_id)

    async def list(
        self,
        type: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: int = 50,
    ) -> List[Meditation]:
        """Активные медитации с опциональными фильтрами"""
        stmt = select(Meditation).where(Meditation.is_active == True)  # noqa: E712
        if type:
            stmt = stmt.where(Meditation.type == type)
        if category:
            stmt = stmt.where(Meditation.category == category)
        if difficulty:
            stmt = stmt.where(Meditation.difficulty == difficulty)
        stmt = stmt.order_by(Meditation.id).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class MeditationSessionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **fields) -> MeditationSession:
        record = MeditationSession(**fields)
        self.session.add(record)
        await self.session.flush()
        return record

    async def get(self, session_id: int) -> Optional[MeditationSession]:
        return await self.session.get(MeditationSession, session_id)

    async def get_active(self, user_id: int) -> Optional[MeditationSession]:
        """Текущая active сессия пользователя"""
        stmt = select(MeditationSession).where(
            MeditationSession.user_id == user_id,
            MeditationSession.status == SessionStatus.ACTIVE.value,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_user(self, user_id: int, limit: int = 10) -> List[MeditationSession]:
        stmt = (
            select(MeditationSession)
            .where(MeditationSession.user_id == user_id)
            .order_by(MeditationSession.start_time.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_completed(self, user_id: int) -> int:
        """Количество завершенных сессий пользователя"""
        stmt = select(func.count(MeditationSession.id)).where(
            MeditationSession.user_id == user_id,
            MeditationSession.completed == True,  # noqa: E712
            MeditationSession.status == SessionStatus.COMPLETED.value,
        )
        return (await self.session.execute(stmt)).scalar() or 0

    async def completed_start_times(
        self, user_id: int, since: datetime, until: Optional[datetime] = None
    ) -> List[datetime]:
        """Время начала завершенных сессий в интервале [since, until)"""
        stmt = select(MeditationSession.start_time).where(
            MeditationSession.user_id == user_id,
            MeditationSession.completed == True,  # noqa: E712
            MeditationSession.status == SessionStatus.COMPLETED.value,
            MeditationSession.start_time >= since,
        )
        if until is not None:
            stmt = stmt.where(MeditationSession.start_time < until)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
