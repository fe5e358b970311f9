# app/core/schemas/social.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class FriendRequestCreate(BaseModel):
    recipient_id: int

class FriendRequestResponse(BaseModel):
    id: int
    requester_id: int
    recipient_id: int
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
