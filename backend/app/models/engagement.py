# app/models/engagement.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, UniqueConstraint
from .base import Base, utcnow

class Achievement(Base):
    """Прогресс пользователя по одному типу достижения из каталога"""
    __tablename__ = "achievements"
    __table_args__ = (UniqueConstraint("user_id", "type"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String)
    points = Column(Integer, default=0)
    progress = Column(Integer, default=0)
    target = Column(Integer, nullable=False)
    completed = Column(Boolean, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def progress_percentage(self) -> int:
        if not self.target:
            return 0
        return round(self.progress / self.target * 100)

    def __str__(self):
        return f"{self.type} ({self.progress}/{self.target})"
