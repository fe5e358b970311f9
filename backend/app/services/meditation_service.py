# app/services/meditation_service.py
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import NotFoundError
from app.core.schemas.meditation import MeditationCreate
from app.models.meditation import Meditation
from app.repositories.meditation_repository import MeditationRepository
import logging

logger = logging.getLogger(__name__)


class MeditationService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = MeditationRepository(session)

    async def create_meditation(self, data: MeditationCreate) -> Meditation:
        meditation = await self.repo.create(**data.model_dump(mode="json"))
        await self.session.commit()
        logger.info(f"🧘 Meditation created: {meditation.id} '{meditation.title}'")
        return meditation

    async def get_meditation(self, meditation_id: int) -> Meditation:
        meditation = await self.repo.get(meditation_id)
        if not meditation or not meditation.is_active:
            raise NotFoundError("Meditation not found")
        return meditation

    async def list_meditations(
        self,
        type: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: int = 50,
    ) -> List[Meditation]:
        return await self.repo.list(type=type, category=category, difficulty=difficulty, limit=limit)
