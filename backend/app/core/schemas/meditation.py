# app/core/schemas/meditation.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from app.models.meditation import (
    MeditationType, MeditationCategory, Difficulty, MoodState,
)

class MeditationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    duration: int = Field(..., ge=1, le=240, description="Duration in minutes")
    type: MeditationType = MeditationType.GUIDED
    category: MeditationCategory = MeditationCategory.MINDFULNESS
    difficulty: Difficulty = Difficulty.BEGINNER
    audio_url: Optional[str] = None
    tags: List[str] = []

class MeditationResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    duration: int
    type: str
    category: str
    difficulty: str
    audio_url: Optional[str] = None
    tags: List[str] = []

    model_config = ConfigDict(from_attributes=True)

# --- Персональные сессии ---

class SessionStart(BaseModel):
    meditation_id: int
    duration: int = Field(..., ge=1, le=240)
    mood_before: Optional[MoodState] = None

class SessionComplete(BaseModel):
    duration_completed: int = Field(..., ge=0)
    mood_before: Optional[MoodState] = None
    mood_after: Optional[MoodState] = None
    focus_score: Optional[float] = Field(None, ge=0, le=10)
    notes: Optional[str] = None
    completed: bool = True

class SessionResponse(BaseModel):
    id: int
    user_id: int
    meditation_id: Optional[int] = None
    group_session_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    duration_completed: int = 0
    status: str
    interruptions: int = 0
    completed: bool = False
    mood_before: Optional[str] = None
    mood_after: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# --- Аналитика ---

class AnalyticsRecord(BaseModel):
    id: int
    session_id: int
    meditation_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    duration_completed: int = 0
    completed: bool = False
    mood_before: Optional[str] = None
    mood_after: Optional[str] = None
    interruptions: int = 0
    focus_score: Optional[float] = None
    maintained_streak: bool = False

    model_config = ConfigDict(from_attributes=True)

class SessionHistory(BaseModel):
    sessions: List[AnalyticsRecord]
    total_pages: int
    total_sessions: int

class UserStats(BaseModel):
    total_sessions: int = 0
    total_minutes: int = 0
    average_focus_score: float = 0.0
    total_interruptions: int = 0

class MoodImprovementStats(BaseModel):
    total_sessions: int = 0
    total_improved: int = 0
    improvement_rate: float = 0.0
