# tests/test_chat.py
import pytest

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.services.chat_service import ChatService
from app.services.group_session_service import GroupSessionService


async def test_joined_participant_can_post(session, make_user, make_group):
    host, a = await make_user(), await make_user()
    group = await make_group(host)
    await GroupSessionService(session).join_session(group.id, a.id)
    chat = ChatService(session)

    message = await chat.add_message(group.id, a.id, "hello everyone")

    assert message.type == "text"
    assert message.user_id == a.id
    assert message.created_at is not None


async def test_left_participant_cannot_post(session, make_user, make_group):
    host, a = await make_user(), await make_user()
    group = await make_group(host)
    groups = GroupSessionService(session)
    await groups.join_session(group.id, a.id)
    await groups.leave_session(group.id, a.id)

    with pytest.raises(AuthorizationError, match="User is not a participant in this session"):
        await ChatService(session).add_message(group.id, a.id, "still here?")


async def test_outsider_cannot_post(session, make_user, make_group):
    host, outsider = await make_user(), await make_user()
    group = await make_group(host)
    with pytest.raises(AuthorizationError):
        await ChatService(session).add_message(group.id, outsider.id, "hi")


async def test_cancelled_session_rejects_everyone(session, make_user, make_group):
    host, a, outsider = [await make_user() for _ in range(3)]
    group = await make_group(host)
    groups = GroupSessionService(session)
    await groups.join_session(group.id, a.id)
    await groups.cancel_session(group.id, host.id)
    chat = ChatService(session)

    for user in (a, outsider, host):
        with pytest.raises(ConflictError, match="Cannot send messages in a cancelled session"):
            await chat.add_message(group.id, user.id, "anyone?")


async def test_unknown_session(session, make_user):
    user = await make_user()
    chat = ChatService(session)
    with pytest.raises(NotFoundError, match="Session not found"):
        await chat.add_message(404, user.id, "hi")
    with pytest.raises(NotFoundError):
        await chat.get_session_messages(404)


async def test_messages_newest_first_with_system_entries(session, make_user, make_group):
    host, a = await make_user(), await make_user()
    group = await make_group(host)
    await GroupSessionService(session).join_session(group.id, a.id)
    chat = ChatService(session)
    await chat.add_message(group.id, a.id, "first")
    await chat.add_message(group.id, a.id, "second")

    messages = await chat.get_session_messages(group.id)

    assert [m.content for m in messages] == ["second", "first", f"{a.username} joined the session"]
    system = messages[-1]
    assert system.type == "system"
    assert system.user_id is None


async def test_message_limit_and_before(session, make_user, make_group):
    host, a = await make_user(), await make_user()
    group = await make_group(host)
    await GroupSessionService(session).join_session(group.id, a.id)
    chat = ChatService(session)
    sent = [await chat.add_message(group.id, a.id, f"m{i}") for i in range(4)]

    latest = await chat.get_session_messages(group.id, limit=2)
    assert [m.content for m in latest] == ["m3", "m2"]

    older = await chat.get_session_messages(group.id, before=sent[0].created_at)
    assert all(m.content not in {"m0", "m1", "m2", "m3"} for m in older)
