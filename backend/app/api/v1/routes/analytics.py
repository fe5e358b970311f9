# app/api/v1/routes/analytics.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.core.schemas.meditation import SessionHistory, UserStats, MoodImprovementStats
from app.models.user import User
from app.services.session_analytics_service import SessionAnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])

@router.get("/history", response_model=SessionHistory)
async def get_session_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await SessionAnalyticsService(session).get_user_session_history(current_user.id, page=page, limit=limit)

@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await SessionAnalyticsService(session).get_user_stats(current_user.id)

@router.get("/mood-stats", response_model=MoodImprovementStats)
async def get_mood_stats(
    since: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Улучшение настроения начиная с since (по умолчанию за все время)"""
    return await SessionAnalyticsService(session).get_mood_improvement_stats(current_user.id, since)
