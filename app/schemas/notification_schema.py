from typing import Optional
from datetime import datetime
from enum import Enum

from app.schemas.base import APIModel
from app.schemas.user_schema import UserSummary

class NotificationType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    CONTACT_REPLY = "contact_reply"

class NotificationRefs(APIModel):
    """Subject references; which ones are required depends on the type"""
    preset_id: Optional[int] = None
    comment_id: Optional[int] = None
    contact_id: Optional[int] = None

class NotificationResponse(APIModel):
    id: int
    recipient_id: int
    actor_id: Optional[int] = None
    type: NotificationType
    preset_id: Optional[int] = None
    comment_id: Optional[int] = None
    contact_id: Optional[int] = None
    read: bool
    created_at: datetime
    actor: Optional[UserSummary] = None

class MarkAllReadResponse(APIModel):
    message: str
    updated: int
