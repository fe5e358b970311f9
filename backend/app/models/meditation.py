# app/models/meditation.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Float, Text, DateTime, Index, text
import enum
from typing import Optional
from .base import Base, JSONType, utcnow

class MeditationType(str, enum.Enum):
    GUIDED = "guided"
    TIMER = "timer"
    AMBIENT = "ambient"

class MeditationCategory(str, enum.Enum):
    MINDFULNESS = "mindfulness"
    BREATHING = "breathing"
    BODY_SCAN = "body-scan"
    LOVING_KINDNESS = "loving-kindness"
    OTHER = "other"

class Difficulty(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class MoodState(str, enum.Enum):
    ANXIOUS = "anxious"
    STRESSED = "stressed"
    NEUTRAL = "neutral"
    CALM = "calm"
    PEACEFUL = "peaceful"

# Упорядоченная шкала настроения: от худшего к лучшему
MOOD_SCALE = [
    MoodState.ANXIOUS,
    MoodState.STRESSED,
    MoodState.NEUTRAL,
    MoodState.CALM,
    MoodState.PEACEFUL,
]

def mood_rank(mood) -> Optional[int]:
    if mood is None:
        return None
    try:
        return MOOD_SCALE.index(MoodState(mood))
    except ValueError:
        return None

def is_mood_improved(mood_before, mood_after) -> bool:
    before, after = mood_rank(mood_before), mood_rank(mood_after)
    if before is None or after is None:
        return False
    return after > before

class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    CANCELLED = "cancelled"


class Meditation(Base):
    __tablename__ = "meditations"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False)  # минуты
    type = Column(String, default=MeditationType.GUIDED.value)
    category = Column(String, default=MeditationCategory.MINDFULNESS.value)
    difficulty = Column(String, default=Difficulty.BEGINNER.value)
    audio_url = Column(String, nullable=True)
    tags = Column(JSONType, default=list)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __str__(self):
        return self.title


class MeditationSession(Base):
    """
    Одна попытка медитации пользователя. Не более одной active сессии на пользователя.
    """
    __tablename__ = "meditation_sessions"
    __table_args__ = (
        Index(
            "uq_meditation_sessions_active_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    meditation_id = Column(Integer, ForeignKey("meditations.id"), nullable=True)
    group_session_id = Column(Integer, ForeignKey("group_sessions.id"), nullable=True)

    start_time = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_time = Column(DateTime(timezone=True), nullable=True)
    duration = Column(Integer, nullable=False)  # запланированные минуты
    duration_completed = Column(Integer, default=0)
    status = Column(String, default=SessionStatus.ACTIVE.value, index=True)
    interruptions = Column(Integer, default=0)
    completed = Column(Boolean, default=False)
    mood_before = Column(String, nullable=True)
    mood_after = Column(String, nullable=True)
    notes = Column(Text, nullable=True)


class SessionAnalytics(Base):
    """
    Денормализованная проекция завершенной сессии, только для агрегатов
    """
    __tablename__ = "session_analytics"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("meditation_sessions.id"), unique=True, nullable=False)
    meditation_id = Column(Integer, ForeignKey("meditations.id"), nullable=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    duration = Column(Integer, nullable=False)
    duration_completed = Column(Integer, default=0)
    completed = Column(Boolean, default=False)
    mood_before = Column(String, nullable=True)
    mood_after = Column(String, nullable=True)
    interruptions = Column(Integer, default=0)
    focus_score = Column(Float, nullable=True)  # 0-10
    maintained_streak = Column(Boolean, default=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
