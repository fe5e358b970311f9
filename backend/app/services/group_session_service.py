# app/services/group_session_service.py
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.core.schemas.group import ParticipantResponse
from app.models.base import as_utc, utcnow
from app.models.group import GroupSession, GroupSessionParticipant, GroupSessionStatus, ParticipantStatus
from app.repositories.friend_repository import FriendRepository
from app.repositories.group_session_repository import GroupSessionRepository
from app.repositories.meditation_repository import MeditationRepository
from app.repositories.user_repository import UserRepository
from app.services import group_lifecycle
from app.services.achievement_service import AchievementService
from app.services.chat_service import ChatService
from app.services.meditation_session_service import MeditationSessionService
import logging

logger = logging.getLogger(__name__)


class GroupSessionService:
    """
    Групповые сессии. Переходы считает group_lifecycle, сервис сохраняет
    статус и пишет системные сообщения в чат; одна транзакция на операцию.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = GroupSessionRepository(session)
        self.users = UserRepository(session)
        self.friends = FriendRepository(session)
        self.chat = ChatService(session)
        self.achievements = AchievementService(session)

    async def create_session(
        self,
        host_id: int,
        meditation_id: int,
        title: str,
        scheduled_time: datetime,
        duration: int,
        options: Optional[Dict[str, Any]] = None,
    ) -> GroupSession:
        scheduled_time = as_utc(scheduled_time).astimezone(timezone.utc)
        if scheduled_time <= utcnow():
            raise ValidationError("Cannot schedule session in the past")

        meditation = await MeditationRepository(self.session).get(meditation_id)
        if not meditation:
            raise NotFoundError("Meditation not found")

        merged = {
            "description": None,
            "max_participants": settings.group_sessions.DEFAULT_MAX_PARTICIPANTS,
            "is_private": False,
            "allowed_participants": [],
        }
        merged.update({k: v for k, v in (options or {}).items() if k in merged and v is not None})

        group = await self.repo.create(
            host_id=host_id,
            meditation_id=meditation_id,
            title=title,
            scheduled_time=scheduled_time,
            duration=duration,
            status=GroupSessionStatus.SCHEDULED.value,
            joined_count=0,
            **merged,
        )
        await self.session.commit()
        logger.info(f"📅 Group session {group.id} scheduled by host {host_id} for {scheduled_time.isoformat()}")
        return group

    async def join_session(self, session_id: int, user_id: int) -> GroupSession:
        group = await self._get(session_id)
        if not await self._can_access(group, user_id):
            raise AuthorizationError("This session is private")

        participant = await self.repo.get_participant(session_id, user_id)
        if participant and participant.status == ParticipantStatus.JOINED.value:
            raise ConflictError("User already joined this session")
        if participant and participant.status == ParticipantStatus.COMPLETED.value:
            raise ConflictError("User already completed this session")

        transition = group_lifecycle.join(group.status, await self._username(user_id))

        if not await self.repo.try_reserve_seat(session_id):
            await self.repo.refresh(group)
            if group.status not in group_lifecycle.JOINABLE:
                raise ConflictError("Session is not open for joining")
            logger.warning(f"⚠️ Session {session_id} is full, user {user_id} rejected")
            raise ConflictError("Session is full")

        await self._enrol(session_id, user_id, participant)
        await self._apply(group, transition)
        await self.session.commit()
        await self.repo.refresh(group)
        logger.info(f"👋 User {user_id} joined group session {session_id}")
        return group

    async def leave_session(self, session_id: int, user_id: int) -> GroupSession:
        group = await self._get(session_id)
        participant = await self.repo.get_participant(session_id, user_id)
        if not participant or participant.status != ParticipantStatus.JOINED.value:
            raise AuthorizationError("User is not a participant in this session")

        remaining = [
            ParticipantStatus.LEFT.value if p.user_id == user_id else p.status
            for p in await self.repo.list_participants(session_id)
        ]
        transition = group_lifecycle.leave(group.status, await self._username(user_id), remaining)

        participant.status = ParticipantStatus.LEFT.value
        await self.session.flush()
        await self.repo.release_seat(session_id)

        await self._apply(group, transition)
        await self.session.commit()
        await self.repo.refresh(group)
        logger.info(f"🚪 User {user_id} left group session {session_id}")
        return group

    async def start_session(self, session_id: int, host_id: int) -> GroupSession:
        group = await self._get(session_id)
        transition = group_lifecycle.start(group.status, group.host_id == host_id)
        await self._apply(group, transition)

        # Хост автоматически становится участником, если есть место
        host_participant = await self.repo.get_participant(session_id, host_id)
        if host_participant is None or host_participant.status == ParticipantStatus.LEFT.value:
            if await self.repo.try_reserve_seat(session_id):
                await self._enrol(session_id, host_id, host_participant)

        await self.session.commit()
        await self.repo.refresh(group)
        logger.info(f"▶️ Group session {session_id} started by host {host_id}")
        return group

    async def complete_session(
        self,
        session_id: int,
        user_id: int,
        duration_completed: int,
        mood_before: Optional[str] = None,
        mood_after: Optional[str] = None,
    ) -> GroupSession:
        group = await self._get(session_id)
        participant = await self.repo.get_participant(session_id, user_id)
        if participant and participant.status == ParticipantStatus.COMPLETED.value:
            raise ConflictError("Session is already completed")
        if not participant or participant.status != ParticipantStatus.JOINED.value:
            raise AuthorizationError("User is not a participant in this session")

        statuses = [
            ParticipantStatus.COMPLETED.value if p.user_id == user_id else p.status
            for p in await self.repo.list_participants(session_id)
        ]
        transition = group_lifecycle.complete_participant(group.status, statuses)

        await self._finish_participant(group, participant, duration_completed, mood_before, mood_after)
        await self._apply(group, transition)
        await self.session.commit()
        await self.repo.refresh(group)
        logger.info(f"✅ User {user_id} completed group session {session_id}")
        return group

    async def end_session(self, session_id: int, host_id: int) -> GroupSession:
        group = await self._get(session_id)
        transition = group_lifecycle.end(group.status, group.host_id == host_id)

        # Кто еще joined, завершает вместе с хостом за фактически прошедшее время
        elapsed = self._elapsed_minutes(group)
        for participant in await self.repo.list_participants(session_id):
            if participant.status == ParticipantStatus.JOINED.value:
                await self._finish_participant(group, participant, elapsed)

        await self._apply(group, transition)
        await self.session.commit()
        await self.repo.refresh(group)
        logger.info(f"⏹️ Group session {session_id} ended by host {host_id}")
        return group

    async def cancel_session(self, session_id: int, host_id: int) -> GroupSession:
        group = await self._get(session_id)
        transition = group_lifecycle.cancel(group.status, group.host_id == host_id)
        await self._apply(group, transition)
        await self.session.commit()
        await self.repo.refresh(group)
        logger.info(f"❌ Group session {session_id} cancelled by host {host_id}")
        return group

    # === ВЫБОРКИ ===

    async def get_session(self, session_id: int, user_id: Optional[int] = None) -> GroupSession:
        group = await self._get(session_id)
        if user_id is not None and not await self._can_access(group, user_id):
            raise NotFoundError("Session not found")
        return group

    async def get_upcoming_sessions(self, user_id: int) -> List[GroupSession]:
        """Будущие запланированные сессии, приватные только если пользователь их видит"""
        friend_ids = set(await self.friends.friend_ids(user_id))
        return [
            group for group in await self.repo.list_upcoming(utcnow())
            if self._visible(group, user_id, friend_ids)
        ]

    async def get_user_sessions(self, user_id: int) -> List[GroupSession]:
        return await self.repo.list_for_user(user_id)

    async def get_participants(self, session_id: int) -> List[GroupSessionParticipant]:
        await self._get(session_id)
        return await self.repo.list_participants(session_id)

    async def describe(self, groups: List[GroupSession]) -> List[Dict[str, Any]]:
        """Сессии вместе со списками участников для ответа API"""
        participants = await self.repo.participants_by_session(g.id for g in groups)
        return [
            {
                "id": g.id,
                "host_id": g.host_id,
                "meditation_id": g.meditation_id,
                "title": g.title,
                "description": g.description,
                "scheduled_time": as_utc(g.scheduled_time),
                "duration": g.duration,
                "max_participants": g.max_participants,
                "is_private": g.is_private,
                "status": g.status,
                "started_at": as_utc(g.started_at),
                "ended_at": as_utc(g.ended_at),
                "participants": [ParticipantResponse.model_validate(p) for p in participants.get(g.id, [])],
            }
            for g in groups
        ]

    # === ВНУТРЕННЕЕ ===

    async def _get(self, session_id: int) -> GroupSession:
        group = await self.repo.get(session_id)
        if not group:
            raise NotFoundError("Session not found")
        return group

    async def _username(self, user_id: int) -> str:
        user = await self.users.get_by_id(user_id)
        return user.username if user else f"User {user_id}"

    def _visible(self, group: GroupSession, user_id: int, friend_ids: set) -> bool:
        if not group.is_private or group.host_id == user_id:
            return True
        return user_id in (group.allowed_participants or []) or group.host_id in friend_ids

    async def _can_access(self, group: GroupSession, user_id: int) -> bool:
        if not group.is_private or group.host_id == user_id:
            return True
        if user_id in (group.allowed_participants or []):
            return True
        return await self.friends.are_friends(group.host_id, user_id)

    async def _enrol(
        self, session_id: int, user_id: int, participant: Optional[GroupSessionParticipant]
    ) -> GroupSessionParticipant:
        """Новый участник или повторный вход после выхода. Место уже занято"""
        if participant is None:
            return await self.repo.add_participant(session_id, user_id)
        participant.status = ParticipantStatus.JOINED.value
        participant.joined_at = utcnow()
        participant.completed_at = None
        await self.session.flush()
        return participant

    async def _finish_participant(
        self,
        group: GroupSession,
        participant: GroupSessionParticipant,
        duration_completed: int,
        mood_before: Optional[str] = None,
        mood_after: Optional[str] = None,
    ) -> None:
        """joined -> completed: освобождает место, пишет личную сессию и счетчик community_pillar"""
        participant.status = ParticipantStatus.COMPLETED.value
        participant.completed_at = utcnow()
        participant.duration_completed = duration_completed
        participant.mood_before = mood_before
        participant.mood_after = mood_after
        await self.session.flush()
        await self.repo.release_seat(group.id)

        await MeditationSessionService(self.session).record_group_completion(
            participant.user_id, group, duration_completed, mood_before=mood_before, mood_after=mood_after,
        )
        await self.achievements.process_group_participation(participant.user_id)

    @staticmethod
    def _elapsed_minutes(group: GroupSession) -> int:
        if group.started_at is None:
            return 0
        minutes = int((utcnow() - as_utc(group.started_at)).total_seconds() // 60)
        return max(0, min(minutes, group.duration))

    async def _apply(self, group: GroupSession, transition: group_lifecycle.Transition) -> None:
        """Сохраняет новый статус и пишет системные сообщения перехода"""
        if transition.status != group.status:
            fields: Dict[str, Any] = {}
            if transition.status == GroupSessionStatus.IN_PROGRESS.value:
                fields["started_at"] = utcnow()
            elif transition.status in group_lifecycle.TERMINAL:
                fields["ended_at"] = utcnow()
            await self.repo.set_status(group, transition.status, **fields)
            if transition.status == GroupSessionStatus.COMPLETED.value:
                await self.achievements.process_group_hosted(group.host_id)

        for content in transition.messages:
            await self.chat.add_system_message(group.id, content)
