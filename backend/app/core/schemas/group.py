# app/core/schemas/group.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from app.models.meditation import MoodState

class GroupSessionCreate(BaseModel):
    meditation_id: int
    title: str = Field(..., min_length=1, max_length=200)
    scheduled_time: datetime
    duration: int = Field(..., ge=1, le=240)
    description: Optional[str] = None
    max_participants: Optional[int] = Field(None, ge=1, le=500)
    is_private: bool = False
    allowed_participants: List[int] = []

class GroupSessionComplete(BaseModel):
    duration_completed: int = Field(..., ge=0)
    mood_before: Optional[MoodState] = None
    mood_after: Optional[MoodState] = None

class ParticipantResponse(BaseModel):
    user_id: int
    status: str
    joined_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_completed: int = 0

    model_config = ConfigDict(from_attributes=True)

class GroupSessionResponse(BaseModel):
    id: int
    host_id: int
    meditation_id: int
    title: str
    description: Optional[str] = None
    scheduled_time: datetime
    duration: int
    max_participants: int
    is_private: bool
    status: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    participants: List[ParticipantResponse] = []

class ChatMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

class ChatMessageResponse(BaseModel):
    id: int
    session_id: int
    user_id: Optional[int] = None
    content: str
    type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
