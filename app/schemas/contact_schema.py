from pydantic import Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from app.schemas.base import APIModel

class ContactCategory(str, Enum):
    QUESTION = "question"
    BUG = "bug"
    FEATURE = "feature"
    ACCOUNT = "account"
    OTHER = "other"

class ContactStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"

class ContactMethod(str, Enum):
    EMAIL = "email"
    TWITTER = "twitter"
    OTHER = "other"

class ContactCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    contact_method: Optional[ContactMethod] = None
    contact_detail: Optional[str] = Field(None, max_length=255)
    category: ContactCategory
    message: str = Field(..., min_length=1, max_length=5000)
    is_anonymous: bool = False

class ContactStatusUpdate(APIModel):
    status: ContactStatus

class ContactReplyCreate(APIModel):
    reply: str = Field(..., max_length=5000)

class ContactReplyResponse(APIModel):
    id: int
    contact_id: int
    reply: str
    created_at: datetime

class ContactResponse(APIModel):
    id: int
    user_id: Optional[int] = None
    name: str
    contact_method: Optional[str] = None
    contact_detail: Optional[str] = None
    category: ContactCategory
    message: str
    status: ContactStatus
    is_anonymous: bool
    created_at: datetime
    updated_at: datetime

class ContactDetailResponse(ContactResponse):
    replies: List[ContactReplyResponse] = []
