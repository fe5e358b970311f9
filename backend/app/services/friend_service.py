# app/services/friend_service.py
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.social import Friend, FriendStatus
from app.models.user import User
from app.repositories.friend_repository import FriendRepository
from app.repositories.user_repository import UserRepository
from app.services.achievement_service import AchievementService
import logging

logger = logging.getLogger(__name__)


class FriendService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = FriendRepository(session)
        self.users = UserRepository(session)
        self.achievements = AchievementService(session)

    async def send_friend_request(self, requester_id: int, recipient_id: int) -> Friend:
        if requester_id == recipient_id:
            raise ValidationError("Cannot send a friend request to yourself")
        if not await self.users.get_by_id(recipient_id):
            raise NotFoundError("User not found")
        if await self.repo.is_blocked(recipient_id, requester_id) or await self.repo.is_blocked(requester_id, recipient_id):
            raise AuthorizationError("Cannot send a friend request to this user")
        if await self.repo.are_friends(requester_id, recipient_id):
            raise ConflictError("Users are already friends")
        if await self.repo.find_pending_between(requester_id, recipient_id):
            raise ConflictError("Friend request already pending")

        request = await self.repo.create_request(requester_id, recipient_id)
        await self.session.commit()
        logger.info(f"🤝 Friend request {request.id}: {requester_id} -> {recipient_id}")
        return request

    async def accept_friend_request(self, request_id: int, user_id: int) -> Friend:
        request = await self._get_pending(request_id)
        if request.recipient_id != user_id:
            raise AuthorizationError("Only the recipient can accept this request")

        request.status = FriendStatus.ACCEPTED.value
        await self.repo.add_friendship(request.requester_id, request.recipient_id)
        await self.session.flush()
        await self.achievements.process_friendships(request.requester_id)
        await self.achievements.process_friendships(request.recipient_id)
        await self.session.commit()
        logger.info(f"🤝 Users {request.requester_id} and {request.recipient_id} are now friends")
        return request

    async def reject_friend_request(self, request_id: int, user_id: int) -> None:
        request = await self._get_pending(request_id)
        if request.recipient_id != user_id:
            raise AuthorizationError("Only the recipient can reject this request")
        await self.repo.delete_request(request)
        await self.session.commit()

    async def remove_friend(self, user_id: int, friend_id: int) -> None:
        if not await self.repo.are_friends(user_id, friend_id):
            raise NotFoundError("Friend not found")
        await self.repo.remove_friendship(user_id, friend_id)
        await self.repo.delete_requests_between(user_id, friend_id)
        await self.session.commit()
        logger.info(f"💔 Users {user_id} and {friend_id} are no longer friends")

    async def block_user(self, user_id: int, target_id: int) -> None:
        if user_id == target_id:
            raise ValidationError("Cannot block yourself")
        if not await self.users.get_by_id(target_id):
            raise NotFoundError("User not found")
        if await self.repo.is_blocked(user_id, target_id):
            raise ConflictError("User is already blocked")
        await self.repo.remove_friendship(user_id, target_id)
        await self.repo.delete_requests_between(user_id, target_id)
        await self.repo.block(user_id, target_id)
        await self.session.commit()
        logger.info(f"🚫 User {user_id} blocked user {target_id}")

    async def unblock_user(self, user_id: int, target_id: int) -> None:
        if not await self.repo.is_blocked(user_id, target_id):
            raise NotFoundError("User is not blocked")
        await self.repo.unblock(user_id, target_id)
        await self.session.commit()

    async def get_friend_list(self, user_id: int) -> List[User]:
        return await self.users.list_by_ids(await self.repo.friend_ids(user_id))

    async def get_pending_requests(self, user_id: int) -> List[Friend]:
        return await self.repo.pending_for(user_id)

    async def get_blocked_users(self, user_id: int) -> List[User]:
        return await self.users.list_by_ids(await self.repo.blocked_ids(user_id))

    async def are_friends(self, user_id: int, other_id: int) -> bool:
        return await self.repo.are_friends(user_id, other_id)

    async def _get_pending(self, request_id: int) -> Friend:
        request = await self.repo.get_request(request_id)
        if not request or request.status != FriendStatus.PENDING.value:
            raise NotFoundError("Friend request not found")
        return request
