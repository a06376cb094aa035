from typing import Optional
from datetime import datetime
from enum import Enum

from app.schemas.base import APIModel

class FollowOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"

class UnfollowOutcome(str, Enum):
    DELETED = "deleted"
    DID_NOT_EXIST = "did_not_exist"

class FollowResponse(APIModel):
    status: FollowOutcome
    follower_id: int
    followed_id: int
    is_following: bool = True
    created_at: Optional[datetime] = None

class UnfollowResponse(APIModel):
    status: UnfollowOutcome
    follower_id: int
    followed_id: int
    is_following: bool = False
