# app/services/chat_service.py
from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.base import as_utc
from app.models.group import ChatMessage, GroupSessionStatus, MessageType, ParticipantStatus
from app.repositories.chat_repository import ChatMessageRepository
from app.repositories.group_session_repository import GroupSessionRepository
import logging

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ChatMessageRepository(session)
        self.groups = GroupSessionRepository(session)

    async def add_message(self, session_id: int, user_id: int, content: str) -> ChatMessage:
        """Текстовое сообщение участника; только для joined и не в отмененной сессии"""
        group = await self.groups.get(session_id)
        if not group:
            raise NotFoundError("Session not found")
        if group.status == GroupSessionStatus.CANCELLED.value:
            raise ConflictError("Cannot send messages in a cancelled session")

        participant = await self.groups.get_participant(session_id, user_id)
        if not participant or participant.status != ParticipantStatus.JOINED.value:
            logger.warning(f"⚠️ User {user_id} is not a participant of session {session_id}")
            raise AuthorizationError("User is not a participant in this session")

        message = await self.repo.create(session_id, user_id, content, MessageType.TEXT.value)
        await self.session.commit()
        return message

    async def add_system_message(self, session_id: int, content: str) -> ChatMessage:
        """Системное сообщение жизненного цикла. Без commit"""
        return await self.repo.create(session_id, None, content, MessageType.SYSTEM.value)

    async def get_session_messages(
        self, session_id: int, limit: Optional[int] = None, before: Optional[datetime] = None
    ) -> List[ChatMessage]:
        """Сообщения сессии, сначала самые новые"""
        if not await self.groups.get(session_id):
            raise NotFoundError("Session not found")
        if before is not None:
            before = as_utc(before).astimezone(timezone.utc)
        return await self.repo.list_for_session(
            session_id, limit=limit or settings.group_sessions.CHAT_PAGE_SIZE, before=before
        )
