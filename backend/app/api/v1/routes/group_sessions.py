# app/api/v1/routes/group_sessions.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.core.schemas.group import (
    GroupSessionCreate,
    GroupSessionComplete,
    GroupSessionResponse,
    ParticipantResponse,
    ChatMessageCreate,
    ChatMessageResponse,
)
from app.models.user import User
from app.services.group_session_service import GroupSessionService
from app.services.chat_service import ChatService
from app.services.ws_manager import manager
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/group-sessions", tags=["group sessions"])

async def _one(service: GroupSessionService, group) -> dict:
    return (await service.describe([group]))[0]

@router.post("/", response_model=GroupSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_group_session(
    data: GroupSessionCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    group = await service.create_session(
        current_user.id,
        data.meditation_id,
        data.title,
        data.scheduled_time,
        data.duration,
        options=data.model_dump(include={"description", "max_participants", "is_private", "allowed_participants"}),
    )
    return await _one(service, group)

@router.get("/upcoming", response_model=List[GroupSessionResponse])
async def get_upcoming_sessions(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await service.describe(await service.get_upcoming_sessions(current_user.id))

@router.get("/mine", response_model=List[GroupSessionResponse])
async def get_my_sessions(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await service.describe(await service.get_user_sessions(current_user.id))

@router.get("/{session_id}", response_model=GroupSessionResponse)
async def get_group_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await _one(service, await service.get_session(session_id, current_user.id))

@router.get("/{session_id}/participants", response_model=List[ParticipantResponse])
async def get_participants(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await GroupSessionService(session).get_participants(session_id)

@router.post("/{session_id}/join", response_model=GroupSessionResponse)
async def join_group_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await _one(service, await service.join_session(session_id, current_user.id))

@router.post("/{session_id}/leave", response_model=GroupSessionResponse)
async def leave_group_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await _one(service, await service.leave_session(session_id, current_user.id))

@router.post("/{session_id}/start", response_model=GroupSessionResponse)
async def start_group_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await _one(service, await service.start_session(session_id, current_user.id))

@router.post("/{session_id}/complete", response_model=GroupSessionResponse)
async def complete_group_session(
    session_id: int,
    data: GroupSessionComplete,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    group = await service.complete_session(
        session_id,
        current_user.id,
        data.duration_completed,
        mood_before=data.mood_before.value if data.mood_before else None,
        mood_after=data.mood_after.value if data.mood_after else None,
    )
    return await _one(service, group)

@router.post("/{session_id}/end", response_model=GroupSessionResponse)
async def end_group_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await _one(service, await service.end_session(session_id, current_user.id))

@router.post("/{session_id}/cancel", response_model=GroupSessionResponse)
async def cancel_group_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    service = GroupSessionService(session)
    return await _one(service, await service.cancel_session(session_id, current_user.id))

# === ЧАТ ===

@router.get("/{session_id}/messages", response_model=List[ChatMessageResponse])
async def get_messages(
    session_id: int,
    limit: Optional[int] = Query(None, ge=1, le=200),
    before: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Сообщения сессии, сначала самые новые"""
    return await ChatService(session).get_session_messages(session_id, limit=limit, before=before)

@router.post("/{session_id}/messages", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    session_id: int,
    data: ChatMessageCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    message = await ChatService(session).add_message(session_id, current_user.id, data.content)
    payload = ChatMessageResponse.model_validate(message)
    # Подключенные к комнате клиенты получают сообщение сразу
    await manager.broadcast_to_session(session_id, {"type": "new_message", "message": payload.model_dump(mode="json")})
    return payload
