# app/repositories/chat_repository.py
from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.group import ChatMessage

class ChatMessageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_id: int, user_id: Optional[int], content: str, type: str) -> ChatMessage:
        message = ChatMessage(
            session_id=session_id,
            user_id=user_id,
            content=content,
            type=type,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(message)
        await self.session.flush()
        return message

    async def list_for_session(
        self, session_id: int, limit: int = 50, before: Optional[datetime] = None
    ) -> List[ChatMessage]:
        """Сообщения сессии, сначала самые новые"""
        stmt = select(ChatMessage).where(ChatMessage.session_id == session_id)
        if before is not None:
            stmt = stmt.where(ChatMessage.created_at < before)
        stmt = stmt.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
