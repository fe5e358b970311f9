# tests/test_friends.py
import pytest

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.repositories.achievement_repository import AchievementRepository
from app.services.friend_service import FriendService


async def befriend(service, a, b):
    request = await service.send_friend_request(a.id, b.id)
    return await service.accept_friend_request(request.id, b.id)


async def test_request_and_accept(session, make_user):
    alice, bob = await make_user("alice"), await make_user("bob")
    service = FriendService(session)

    request = await service.send_friend_request(alice.id, bob.id)
    assert [r.id for r in await service.get_pending_requests(bob.id)] == [request.id]
    assert await service.get_pending_requests(alice.id) == []

    accepted = await service.accept_friend_request(request.id, bob.id)

    assert accepted.status == "accepted"
    assert await service.are_friends(alice.id, bob.id)
    assert await service.are_friends(bob.id, alice.id)
    assert [u.username for u in await service.get_friend_list(alice.id)] == ["bob"]
    assert await service.get_pending_requests(bob.id) == []


async def test_only_recipient_can_answer(session, make_user):
    alice, bob = await make_user(), await make_user()
    service = FriendService(session)
    request = await service.send_friend_request(alice.id, bob.id)

    with pytest.raises(AuthorizationError):
        await service.accept_friend_request(request.id, alice.id)
    with pytest.raises(AuthorizationError):
        await service.reject_friend_request(request.id, alice.id)

    await service.reject_friend_request(request.id, bob.id)
    with pytest.raises(NotFoundError, match="Friend request not found"):
        await service.accept_friend_request(request.id, bob.id)


async def test_request_validation(session, make_user):
    alice, bob = await make_user(), await make_user()
    service = FriendService(session)

    with pytest.raises(ValidationError):
        await service.send_friend_request(alice.id, alice.id)
    with pytest.raises(NotFoundError, match="User not found"):
        await service.send_friend_request(alice.id, 9999)

    await service.send_friend_request(alice.id, bob.id)
    with pytest.raises(ConflictError):
        await service.send_friend_request(alice.id, bob.id)
    with pytest.raises(ConflictError):
        await service.send_friend_request(bob.id, alice.id)


async def test_cannot_request_existing_friend(session, make_user):
    alice, bob = await make_user(), await make_user()
    service = FriendService(session)
    await befriend(service, alice, bob)
    with pytest.raises(ConflictError, match="Users are already friends"):
        await service.send_friend_request(bob.id, alice.id)


async def test_remove_friend(session, make_user):
    alice, bob = await make_user(), await make_user()
    service = FriendService(session)
    await befriend(service, alice, bob)

    await service.remove_friend(bob.id, alice.id)

    assert not await service.are_friends(alice.id, bob.id)
    with pytest.raises(NotFoundError):
        await service.remove_friend(alice.id, bob.id)
    await service.send_friend_request(alice.id, bob.id)


async def test_block_removes_friendship_and_stops_requests(session, make_user):
    alice, bob = await make_user("alice"), await make_user("bob")
    service = FriendService(session)
    await befriend(service, alice, bob)

    await service.block_user(alice.id, bob.id)

    assert not await service.are_friends(alice.id, bob.id)
    assert [u.username for u in await service.get_blocked_users(alice.id)] == ["bob"]
    with pytest.raises(AuthorizationError):
        await service.send_friend_request(bob.id, alice.id)
    with pytest.raises(AuthorizationError):
        await service.send_friend_request(alice.id, bob.id)
    with pytest.raises(ConflictError):
        await service.block_user(alice.id, bob.id)

    await service.unblock_user(alice.id, bob.id)
    assert await service.get_blocked_users(alice.id) == []
    with pytest.raises(NotFoundError):
        await service.unblock_user(alice.id, bob.id)
    await service.send_friend_request(bob.id, alice.id)


async def test_block_self_and_unknown(session, make_user):
    alice = await make_user()
    service = FriendService(session)
    with pytest.raises(ValidationError):
        await service.block_user(alice.id, alice.id)
    with pytest.raises(NotFoundError):
        await service.block_user(alice.id, 9999)


async def test_friendships_advance_social_butterfly(session, make_user):
    alice = await make_user()
    others = [await make_user() for _ in range(5)]
    service = FriendService(session)

    for other in others[:4]:
        await befriend(service, alice, other)
    butterfly = await AchievementRepository(session).get(alice.id, "social_butterfly")
    assert butterfly.progress == 4
    assert not butterfly.completed

    await befriend(service, others[4], alice)
    await session.refresh(butterfly)
    assert butterfly.completed
    assert butterfly.progress == 5

    friend_side = await AchievementRepository(session).get(others[0].id, "social_butterfly")
    assert friend_side.progress == 1
