# app/models/user.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
import enum
from .base import Base, utcnow

class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

# friendIds / blockedUserIds: связи пользователь -> пользователь
user_friends = Table(
    "user_friends",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("friend_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

user_blocks = Table(
    "user_blocks",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("blocked_user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default=UserRole.USER.value)
    avatar_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __str__(self):
        return self.username

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
