# app/models/social.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
import enum
from .base import Base, utcnow

class FriendStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"

class Friend(Base):
    """Заявка в друзья"""
    __tablename__ = "friends"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, default=FriendStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
