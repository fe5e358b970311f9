# app/api/v1/routes/meditations.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.core.schemas.meditation import MeditationCreate, MeditationResponse
from app.models.meditation import MeditationType, MeditationCategory, Difficulty
from app.models.user import User
from app.services.meditation_service import MeditationService

router = APIRouter(prefix="/meditations", tags=["meditations"])

@router.get("/", response_model=List[MeditationResponse])
async def list_meditations(
    type: Optional[MeditationType] = None,
    category: Optional[MeditationCategory] = None,
    difficulty: Optional[Difficulty] = None,
    limit: int = Query(50, ge=1, le=100),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationService(session).list_meditations(
        type=type.value if type else None,
        category=category.value if category else None,
        difficulty=difficulty.value if difficulty else None,
        limit=limit,
    )

@router.get("/{meditation_id}", response_model=MeditationResponse)
async def get_meditation(
    meditation_id: int,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationService(session).get_meditation(meditation_id)

@router.post("/", response_model=MeditationResponse, status_code=status.HTTP_201_CREATED)
async def create_meditation(
    data: MeditationCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await MeditationService(session).create_meditation(data)
