# app/models/group.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Text, UniqueConstraint
import enum
from .base import Base, JSONType, utcnow

class GroupSessionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ParticipantStatus(str, enum.Enum):
    JOINED = "joined"
    LEFT = "left"
    COMPLETED = "completed"

class MessageType(str, enum.Enum):
    TEXT = "text"
    SYSTEM = "system"


class GroupSession(Base):
    __tablename__ = "group_sessions"

    id = Column(Integer, primary_key=True, index=True)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    meditation_id = Column(Integer, ForeignKey("meditations.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
    duration = Column(Integer, nullable=False)
    max_participants = Column(Integer, nullable=False, default=10)
    is_private = Column(Boolean, default=False)
    allowed_participants = Column(JSONType, default=list)  # список user_id
    status = Column(String, default=GroupSessionStatus.SCHEDULED.value, index=True)

    # Число участников со статусом joined, меняется только условным UPDATE
    joined_count = Column(Integer, nullable=False, default=0, server_default="0")

    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __str__(self):
        return self.title


class GroupSessionParticipant(Base):
    __tablename__ = "group_session_participants"
    __table_args__ = (UniqueConstraint("session_id", "user_id"),)

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("group_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, default=ParticipantStatus.JOINED.value)
    joined_at = Column(DateTime(timezone=True), default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_completed = Column(Integer, default=0)
    mood_before = Column(String, nullable=True)
    mood_after = Column(String, nullable=True)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("group_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # NULL для системных сообщений
    content = Column(Text, nullable=False)
    type = Column(String, default=MessageType.TEXT.value)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
