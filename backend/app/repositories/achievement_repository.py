# app/repositories/achievement_repository.py
from typing import Optional, List, Set
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.engagement import Achievement

class AchievementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(self, user_id: int) -> List[Achievement]:
        stmt = select(Achievement).where(Achievement.user_id == user_id).order_by(Achievement.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, user_id: int, type: str) -> Optional[Achievement]:
        stmt = select(Achievement).where(Achievement.user_id == user_id, Achievement.type == type)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def existing_types(self, user_id: int) -> Set[str]:
        stmt = select(Achievement.type).where(Achievement.user_id == user_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def completed_types(self, user_id: int) -> List[str]:
        stmt = select(Achievement.type).where(
            Achievement.user_id == user_id,
            Achievement.completed == True,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_many(self, achievements: List[Achievement]) -> None:
        self.session.add_all(achievements)
        await self.session.flush()
