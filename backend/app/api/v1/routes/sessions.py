# app/api/v1/routes/sessions.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.core.schemas.meditation import SessionStart, SessionComplete, SessionResponse
from app.models.user import User
from app.services.meditation_session_service import MeditationSessionService

router = APIRouter(prefix="/sessions", tags=["meditation sessions"])

@router.post("/", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    data: SessionStart,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Начать персональную сессию медитации"""
    return await MeditationSessionService(session).start_session(
        current_user.id,
        data.meditation_id,
        data.duration,
        mood_before=data.mood_before.value if data.mood_before else None,
    )

@router.get("/", response_model=List[SessionResponse])
async def list_sessions(
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationSessionService(session).get_user_sessions(current_user.id, limit=limit)

@router.get("/active", response_model=Optional[SessionResponse])
async def get_active_session(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationSessionService(session).get_active_session(current_user.id)

@router.post("/{session_id}/interrupt", response_model=SessionResponse)
async def record_interruption(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationSessionService(session).record_interruption(session_id, current_user.id)

@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: int,
    data: SessionComplete,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Завершение сессии: аналитика и достижения пересчитываются в той же транзакции"""
    return await MeditationSessionService(session).complete_session(session_id, current_user.id, data)

@router.post("/{session_id}/abandon", response_model=SessionResponse)
async def abandon_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationSessionService(session).abandon_session(session_id, current_user.id)
