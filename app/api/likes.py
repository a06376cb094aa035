from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.config import settings
from app.schemas.like_schema import BookmarkToggleResponse, LikeToggleResponse
from app.services.like_service import LikeService
from app.services.auth_service import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.utils.exceptions import LoopediaError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/{preset_id}/like", response_model=LikeToggleResponse)
@limiter.limit(settings.CONTENT_RATE_LIMIT)
async def toggle_like(
    request: Request,
    preset_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Like a preset, or remove the like if it is already there"""
    user_id = current_user.id
    try:
        like_service = LikeService(db)
        liked, like_count = await like_service.toggle_like(preset_id, user_id)
        return LikeToggleResponse(preset_id=preset_id, liked=liked, like_count=like_count)
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error toggling like: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to like preset"
        )

@router.delete("/{preset_id}/like", response_model=LikeToggleResponse)
async def unlike_preset(
    preset_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove a like; succeeds whether or not the like existed"""
    user_id = current_user.id
    like_service = LikeService(db)
    await like_service.unlike_preset(preset_id, user_id)
    like_count = await like_service.count_likes(preset_id)
    return LikeToggleResponse(preset_id=preset_id, liked=False, like_count=like_count)

@router.post("/{preset_id}/bookmark", response_model=BookmarkToggleResponse)
@limiter.limit(settings.CONTENT_RATE_LIMIT)
async def toggle_bookmark(
    request: Request,
    preset_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Bookmark a preset, or remove the bookmark if it is already there"""
    user_id = current_user.id
    try:
        bookmarked = await LikeService(db).toggle_bookmark(preset_id, user_id)
        return BookmarkToggleResponse(preset_id=preset_id, bookmarked=bookmarked)
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error toggling bookmark: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to bookmark preset"
        )
