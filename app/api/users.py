from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from app.schemas.preset_schema import PresetResponse
from app.schemas.user_schema import UserInDB, UserPublic, UserUpdate
from app.services.like_service import LikeService
from app.services.user_service import UserService
from app.services.auth_service import get_current_user, get_current_user_optional
from app.db.session import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()

@router.put("/me", response_model=UserInDB)
async def update_me(
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update the current user's profile"""
    return await UserService(db).update_profile(current_user, user_data)

@router.get("/me/bookmarks", response_model=List[PresetResponse])
async def get_my_bookmarks(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Presets bookmarked by the current user, most recent first"""
    return await LikeService(db).get_bookmarked_presets(current_user.id)

@router.get("/{user_id}", response_model=UserPublic)
async def get_user_profile(
    user_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """Public profile, including whether the viewer follows this user"""
    viewer_id = current_user.id if current_user else None
    return await UserService(db).get_profile(user_id, viewer_id=viewer_id)
