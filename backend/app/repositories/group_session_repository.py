# app/repositories/group_session_repository.py
from typing import Optional, List, Dict, Iterable
from datetime import datetime
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.group import (
    GroupSession, GroupSessionParticipant, GroupSessionStatus, ParticipantStatus,
)

JOINABLE_STATUSES = (GroupSessionStatus.SCHEDULED.value, GroupSessionStatus.IN_PROGRESS.value)

class GroupSessionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **fields) -> GroupSession:
        group = GroupSession(**fields)
        self.session.add(group)
        await self.session.flush()
        return group

    async def get(self, session_id: int) -> Optional[GroupSession]:
        return await self.session.get(GroupSession, session_id)

    async def refresh(self, group: GroupSession) -> GroupSession:
        await self.session.refresh(group)
        return group

    async def set_status(self, group: GroupSession, status: str, **fields) -> GroupSession:
        group.status = status
        for key, value in fields.items():
            setattr(group, key, value)
        await self.session.flush()
        return group

    async def try_reserve_seat(self, session_id: int) -> bool:
        """
        Атомарно занимает место: один условный UPDATE вместо check-then-act.
        False - мест нет или сессия не принимает участников.
        """
        stmt = (
            update(GroupSession)
            .where(
                GroupSession.id == session_id,
                GroupSession.joined_count < GroupSession.max_participants,
                GroupSession.status.in_(JOINABLE_STATUSES),
            )
            .values(joined_count=GroupSession.joined_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def release_seat(self, session_id: int) -> None:
        stmt = (
            update(GroupSession)
            .where(GroupSession.id == session_id, GroupSession.joined_count > 0)
            .values(joined_count=GroupSession.joined_count - 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    # === УЧАСТНИКИ ===

    async def get_participant(self, session_id: int, user_id: int) -> Optional[GroupSessionParticipant]:
        stmt = select(GroupSessionParticipant).where(
            GroupSessionParticipant.session_id == session_id,
            GroupSessionParticipant.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_participant(self, session_id: int, user_id: int) -> GroupSessionParticipant:
        participant = GroupSessionParticipant(
            session_id=session_id,
            user_id=user_id,
            status=ParticipantStatus.JOINED.value,
        )
        self.session.add(participant)
        await self.session.flush()
        return participant

    async def list_participants(self, session_id: int) -> List[GroupSessionParticipant]:
        """Участники в порядке присоединения"""
        stmt = (
            select(GroupSessionParticipant)
            .where(GroupSessionParticipant.session_id == session_id)
            .order_by(GroupSessionParticipant.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def participants_by_session(self, session_ids: Iterable[int]) -> Dict[int, List[GroupSessionParticipant]]:
        ids = list(session_ids)
        grouped: Dict[int, List[GroupSessionParticipant]] = {sid: [] for sid in ids}
        if not ids:
            return grouped
        stmt = (
            select(GroupSessionParticipant)
            .where(GroupSessionParticipant.session_id.in_(ids))
            .order_by(GroupSessionParticipant.id)
        )
        result = await self.session.execute(stmt)
        for participant in result.scalars().all():
            grouped[participant.session_id].append(participant)
        return grouped

    # === ВЫБОРКИ ===

    async def list_upcoming(self, now: datetime) -> List[GroupSession]:
        """Запланированные сессии в будущем, по времени начала"""
        stmt = (
            select(GroupSession)
            .where(
                GroupSession.status == GroupSessionStatus.SCHEDULED.value,
                GroupSession.scheduled_time > now,
            )
            .order_by(GroupSession.scheduled_time.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(self, user_id: int) -> List[GroupSession]:
        """Сессии, где пользователь хост или участник; новые первыми"""
        participant_sessions = select(GroupSessionParticipant.session_id).where(
            GroupSessionParticipant.user_id == user_id
        )
        stmt = (
            select(GroupSession)
            .where(or_(GroupSession.host_id == user_id, GroupSession.id.in_(participant_sessions)))
            .order_by(GroupSession.scheduled_time.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
