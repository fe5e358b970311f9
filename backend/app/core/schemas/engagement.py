# app/core/schemas/engagement.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class AchievementResponse(BaseModel):
    type: str
    title: str
    description: Optional[str] = None
    points: int
    progress: int
    target: int
    progress_percentage: int = 0
    completed: bool
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class PointsResponse(BaseModel):
    total: int
