from pydantic import Field
from typing import Optional
from datetime import datetime
from enum import Enum

from app.schemas.base import APIModel
from app.schemas.user_schema import UserSummary

class PresetType(str, Enum):
    INPUT_FX = "INPUT_FX"
    TRACK_FX = "TRACK_FX"
    INPUT_TRACK_FX = "INPUT_TRACK_FX"

class PresetCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: PresetType

class PresetResponse(APIModel):
    id: int
    user_id: int
    name: str
    type: PresetType
    created_at: datetime
    user: Optional[UserSummary] = None
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False
    is_bookmarked: bool = False

class PresetUpdate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
