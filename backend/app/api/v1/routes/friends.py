# app/api/v1/routes/friends.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.core.schemas.auth import UserPublic
from app.core.schemas.social import FriendRequestCreate, FriendRequestResponse
from app.models.user import User
from app.services.friend_service import FriendService

router = APIRouter(prefix="/friends", tags=["friends"])

@router.get("/", response_model=List[UserPublic])
async def get_friends(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await FriendService(session).get_friend_list(current_user.id)

@router.get("/requests", response_model=List[FriendRequestResponse])
async def get_pending_requests(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await FriendService(session).get_pending_requests(current_user.id)

@router.post("/requests", response_model=FriendRequestResponse, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    data: FriendRequestCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await FriendService(session).send_friend_request(current_user.id, data.recipient_id)

@router.post("/requests/{request_id}/accept", response_model=FriendRequestResponse)
async def accept_friend_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await FriendService(session).accept_friend_request(request_id, current_user.id)

@router.post("/requests/{request_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_friend_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    await FriendService(session).reject_friend_request(request_id, current_user.id)

@router.delete("/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_friend(
    friend_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    await FriendService(session).remove_friend(current_user.id, friend_id)

@router.get("/blocked", response_model=List[UserPublic])
async def get_blocked_users(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await FriendService(session).get_blocked_users(current_user.id)

@router.post("/blocked/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def block_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    await FriendService(session).block_user(current_user.id, user_id)

@router.delete("/blocked/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    await FriendService(session).unblock_user(current_user.id, user_id)
