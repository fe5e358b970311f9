# app/services/ws_manager.py
from fastapi import WebSocket
from typing import Dict, Any, Optional, Set
import json
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.core.database import db_helper
from app.core.exceptions import AppException
from app.core.schemas.group import ChatMessageResponse
from app.core.security import decode_token
from app.models.group import ParticipantStatus
from app.repositories.group_session_repository import GroupSessionRepository
from app.services.chat_service import ChatService
import logging

logger = logging.getLogger(__name__)


class ChatConnectionManager:
    """
    Чат групповых сессий в реальном времени: одно соединение на пользователя,
    комнаты по id групповой сессии. Доставка at-most-once.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_factory = session_factory or db_helper.session_factory
        self.active_connections: Dict[int, WebSocket] = {}
        self.rooms: Dict[int, Set[int]] = {}
        self.user_rooms: Dict[int, Set[int]] = {}

    # === АВТОРИЗАЦИЯ ===
    async def authenticate_user(self, token: Optional[str]) -> Optional[int]:
        if not token:
            logger.warning("🔴 WS Auth: token is missing")
            return None
        if token.startswith("Bearer "):
            token = token.split(" ", 1)[1]
        try:
            payload = decode_token(token)
        except ValueError as e:
            logger.warning(f"🔴 WS Auth Error: {e}")
            return None
        if payload.get("type") != "access" or not payload.get("sub"):
            return None
        return int(payload["sub"])

    # === ПОДКЛЮЧЕНИЕ/ОТКЛЮЧЕНИЕ ===
    async def connect(self, websocket: WebSocket, user_id: int):
        await websocket.accept()
        previous = self.active_connections.get(user_id)
        self.active_connections[user_id] = websocket
        if previous is not None and previous is not websocket:
            # Новое соединение вытесняет старое; комнаты пользователя сохраняются
            try:
                await previous.close(code=1000)
            except Exception as e:
                logger.warning(f"⚠️ Closing previous socket of user {user_id} failed: {e}")
        logger.info(f"🟢 User {user_id} connected to chat")

    def disconnect(self, user_id: int, websocket: Optional[WebSocket] = None):
        """
        Убирает соединение и членство во всех комнатах.
        Если передан websocket, а у пользователя уже другое соединение, ничего не делает.
        """
        if websocket is not None and self.active_connections.get(user_id) is not websocket:
            return
        self.active_connections.pop(user_id, None)
        for session_id in self.user_rooms.pop(user_id, set()):
            members = self.rooms.get(session_id)
            if members is not None:
                members.discard(user_id)
                if not members:
                    del self.rooms[session_id]
        logger.info(f"🟡 User {user_id} disconnected from chat")

    # === ОТПРАВКА СООБЩЕНИЙ ===
    async def send_personal_message(self, message: dict, user_id: int):
        ws = self.active_connections.get(user_id)
        if ws:
            try:
                await ws.send_text(json.dumps(message))
            except Exception as e:
                logger.warning(f"⚠️ Send to user {user_id} failed, dropping connection: {e}")
                self.disconnect(user_id, ws)

    async def broadcast_to_session(self, session_id: int, message: dict, exclude: Optional[int] = None):
        for user_id in list(self.rooms.get(session_id, set())):
            if user_id != exclude:
                await self.send_personal_message(message, user_id)

    async def send_error(self, user_id: int, message: str):
        await self.send_personal_message({"type": "error", "message": message}, user_id)

    # === КОМНАТЫ ===
    async def join_room(self, user_id: int, session_id: int):
        async with self.session_factory() as session:
            repo = GroupSessionRepository(session)
            group = await repo.get(session_id)
            if not group:
                await self.send_error(user_id, "Session not found")
                return
            participant = await repo.get_participant(session_id, user_id)

        is_joined = participant is not None and participant.status == ParticipantStatus.JOINED.value
        if not is_joined and group.host_id != user_id:
            await self.send_error(user_id, "User is not a participant in this session")
            return

        self.rooms.setdefault(session_id, set()).add(user_id)
        self.user_rooms.setdefault(user_id, set()).add(session_id)
        await self.broadcast_to_session(session_id, {
            "type": "user_joined",
            "session_id": session_id,
            "user_id": user_id,
        })

    async def leave_room(self, user_id: int, session_id: int):
        members = self.rooms.get(session_id)
        if not members or user_id not in members:
            return
        members.discard(user_id)
        if not members:
            del self.rooms[session_id]
        self.user_rooms.get(user_id, set()).discard(session_id)
        await self.broadcast_to_session(session_id, {
            "type": "user_left",
            "session_id": session_id,
            "user_id": user_id,
        })
        await self.send_personal_message({"type": "user_left", "session_id": session_id, "user_id": user_id}, user_id)

    async def send_chat_message(self, user_id: int, session_id: int, content: Any):
        """Сохраняет сообщение через ChatService и рассылает комнате"""
        if not isinstance(content, str) or not content.strip():
            await self.send_error(user_id, "Message content is required")
            return
        try:
            async with self.session_factory() as session:
                message = await ChatService(session).add_message(session_id, user_id, content)
        except AppException as e:
            await self.send_error(user_id, e.detail)
            return

        payload = ChatMessageResponse.model_validate(message).model_dump(mode="json")
        await self.broadcast_to_session(session_id, {"type": "new_message", "message": payload})
        if user_id not in self.rooms.get(session_id, set()):
            await self.send_personal_message({"type": "new_message", "message": payload}, user_id)

    async def broadcast_typing(self, user_id: int, session_id: int, event: str):
        if user_id not in self.rooms.get(session_id, set()):
            return
        await self.broadcast_to_session(
            session_id,
            {"type": event, "session_id": session_id, "user_id": user_id},
            exclude=user_id,
        )

    # === ОБРАБОТКА СООБЩЕНИЙ ОТ КЛИЕНТА ===
    async def handle_client_message(self, websocket: WebSocket, user_id: int, data: str):
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            await self.send_error(user_id, "Invalid message format")
            return
        if not isinstance(payload, dict):
            await self.send_error(user_id, "Invalid message format")
            return

        event = payload.get("type")
        session_id = payload.get("session_id")
        if event in ("join_session", "leave_session", "send_message", "typing_start", "typing_end"):
            if not isinstance(session_id, int):
                await self.send_error(user_id, "session_id is required")
                return

        if event == "join_session":
            await self.join_room(user_id, session_id)
        elif event == "leave_session":
            await self.leave_room(user_id, session_id)
        elif event == "send_message":
            await self.send_chat_message(user_id, session_id, payload.get("content"))
        elif event in ("typing_start", "typing_end"):
            await self.broadcast_typing(user_id, session_id, event)
        else:
            await self.send_error(user_id, "Unknown event type")


# Экземпляр менеджера
manager = ChatConnectionManager()
