# app/repositories/friend_repository.py
from typing import Optional, List
from sqlalchemy import select, delete, insert, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.social import Friend, FriendStatus
from app.models.user import user_friends, user_blocks

class FriendRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # === ЗАЯВКИ ===

    async def create_request(self, requester_id: int, recipient_id: int) -> Friend:
        request = Friend(
            requester_id=requester_id,
            recipient_id=recipient_id,
            status=FriendStatus.PENDING.value,
        )
        self.session.add(request)
        await self.session.flush()
        return request

    async def get_request(self, request_id: int) -> Optional[Friend]:
        return await self.session.get(Friend, request_id)

    async def find_pending_between(self, user_a: int, user_b: int) -> Optional[Friend]:
        """Ожидающая заявка в любом направлении"""
        stmt = select(Friend).where(
            Friend.status == FriendStatus.PENDING.value,
            or_(
                and_(Friend.requester_id == user_a, Friend.recipient_id == user_b),
                and_(Friend.requester_id == user_b, Friend.recipient_id == user_a),
            ),
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def pending_for(self, user_id: int) -> List[Friend]:
        stmt = (
            select(Friend)
            .where(Friend.recipient_id == user_id, Friend.status == FriendStatus.PENDING.value)
            .order_by(Friend.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_request(self, request: Friend) -> None:
        await self.session.delete(request)
        await self.session.flush()

    async def delete_requests_between(self, user_a: int, user_b: int) -> None:
        stmt = delete(Friend).where(
            or_(
                and_(Friend.requester_id == user_a, Friend.recipient_id == user_b),
                and_(Friend.requester_id == user_b, Friend.recipient_id == user_a),
            )
        )
        await self.session.execute(stmt)

    # === ДРУЗЬЯ (friendIds) ===

    async def friend_ids(self, user_id: int) -> List[int]:
        stmt = select(user_friends.c.friend_id).where(user_friends.c.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def are_friends(self, user_a: int, user_b: int) -> bool:
        stmt = select(func.count()).select_from(user_friends).where(
            user_friends.c.user_id == user_a,
            user_friends.c.friend_id == user_b,
        )
        return bool((await self.session.execute(stmt)).scalar())

    async def count_friends(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(user_friends).where(user_friends.c.user_id == user_id)
        return (await self.session.execute(stmt)).scalar() or 0

    async def add_friendship(self, user_a: int, user_b: int) -> None:
        """Связь хранится в обе стороны"""
        await self.session.execute(
            insert(user_friends),
            [
                {"user_id": user_a, "friend_id": user_b},
                {"user_id": user_b, "friend_id": user_a},
            ],
        )

    async def remove_friendship(self, user_a: int, user_b: int) -> None:
        stmt = delete(user_friends).where(
            or_(
                and_(user_friends.c.user_id == user_a, user_friends.c.friend_id == user_b),
                and_(user_friends.c.user_id == user_b, user_friends.c.friend_id == user_a),
            )
        )
        await self.session.execute(stmt)

    # === БЛОКИРОВКИ (blockedUserIds) ===

    async def blocked_ids(self, user_id: int) -> List[int]:
        stmt = select(user_blocks.c.blocked_user_id).where(user_blocks.c.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_blocked(self, user_id: int, target_id: int) -> bool:
        """user_id заблокировал target_id"""
        stmt = select(func.count()).select_from(user_blocks).where(
            user_blocks.c.user_id == user_id,
            user_blocks.c.blocked_user_id == target_id,
        )
        return bool((await self.session.execute(stmt)).scalar())

    async def block(self, user_id: int, target_id: int) -> None:
        await self.session.execute(
            insert(user_blocks).values(user_id=user_id, blocked_user_id=target_id)
        )

    async def unblock(self, user_id: int, target_id: int) -> None:
        stmt = delete(user_blocks).where(
            user_blocks.c.user_id == user_id,
            user_blocks.c.blocked_user_id == target_id,
        )
        await self.session.execute(stmt)
