# app/api/v1/routes/achievements.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.core.schemas.engagement import AchievementResponse, PointsResponse
from app.models.user import User
from app.services.achievement_service import AchievementService

router = APIRouter(prefix="/achievements", tags=["achievements"])

@router.get("/", response_model=List[AchievementResponse])
async def get_achievements(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await AchievementService(session).get_user_achievements(current_user.id)

@router.get("/points", response_model=PointsResponse)
async def get_points(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    total = await AchievementService(session).get_user_points(current_user.id)
    return PointsResponse(total=total)
