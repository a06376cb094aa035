from pydantic import Field
from typing import Optional
from datetime import datetime

from app.schemas.base import APIModel

class UserBase(APIModel):
    username: str
    nickname: Optional[str] = None

class UserCreate(UserBase):
    username: str = Field(..., min_length=3, max_length=50, pattern=r'^[a-zA-Z0-9_]+$')
    nickname: Optional[str] = Field(None, max_length=100)
    password: str = Field(..., min_length=6, max_length=100)

class UserUpdate(APIModel):
    nickname: Optional[str] = Field(None, max_length=100)
    profile_text: Optional[str] = Field(None, max_length=1000)
    avatar_url: Optional[str] = Field(None, max_length=255)

class UserSummary(UserBase):
    """Actor / author display info embedded in other payloads"""
    id: int
    avatar_url: Optional[str] = None
    is_verified: bool = False

class UserInDB(UserSummary):
    profile_text: Optional[str] = None
    is_admin: bool = False
    created_at: datetime

class UserPublic(UserSummary):
    profile_text: Optional[str] = None
    created_at: datetime
    followers_count: int = 0
    following_count: int = 0
    # Relationship status with current user
    is_following: bool = False

class FollowListUser(UserSummary):
    """Entry of a follower/following list, annotated for the viewer"""
    profile_text: Optional[str] = None
    is_following: bool = False
