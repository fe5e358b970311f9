# app/models/__init__.py
from .base import Base
from .user import User, UserRole, user_friends, user_blocks
from .meditation import (
    Meditation, MeditationSession, SessionAnalytics,
    MeditationType, MeditationCategory, Difficulty, MoodState, SessionStatus,
)
from .engagement import Achievement
from .group import (
    GroupSession, GroupSessionParticipant, ChatMessage,
    GroupSessionStatus, ParticipantStatus, MessageType,
)
from .social import Friend, FriendStatus

# Этот список нужен, чтобы IDE и инструменты видели, что экспортируется
__all__ = [
    "Base",
    "User", "UserRole", "user_friends", "user_blocks",
    "Meditation", "MeditationSession", "SessionAnalytics",
    "MeditationType", "MeditationCategory", "Difficulty", "MoodState", "SessionStatus",
    "Achievement",
    "GroupSession", "GroupSessionParticipant", "ChatMessage",
    "GroupSessionStatus", "ParticipantStatus", "MessageType",
    "Friend", "FriendStatus",
]
