from pydantic import Field
from datetime import datetime

from app.schemas.base import APIModel
from app.schemas.user_schema import UserSummary

class CommentCreate(APIModel):
    content: str = Field(..., max_length=2000)

class CommentResponse(APIModel):
    id: int
    preset_id: int
    user_id: int
    content: str
    created_at: datetime
    user: UserSummary
