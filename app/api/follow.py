from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from app.config import settings
from app.schemas.follow_schema import FollowResponse, UnfollowResponse
from app.schemas.user_schema import FollowListUser
from app.services.follow_service import FollowService
from app.services.auth_service import get_current_user, get_current_user_optional
from app.db.session import get_db
from app.models.user import User
from app.utils.exceptions import LoopediaError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/{user_id}/follow", response_model=FollowResponse)
@limiter.limit(settings.FOLLOW_RATE_LIMIT)
async def follow_user(
    request: Request,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Follow a user; repeating the call is a no-op"""
    follower_id = current_user.id
    try:
        follow_service = FollowService(db)
        follow, outcome = await follow_service.follow(follower_id, user_id)

        return FollowResponse(
            status=outcome,
            follower_id=follower_id,
            followed_id=user_id,
            created_at=follow.created_at
        )
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error following user: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to follow user"
        )

@router.delete("/{user_id}/follow", response_model=UnfollowResponse)
@limiter.limit(settings.FOLLOW_RATE_LIMIT)
async def unfollow_user(
    request: Request,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unfollow a user; unfollowing someone you do not follow is a no-op"""
    follower_id = current_user.id
    try:
        follow_service = FollowService(db)
        outcome = await follow_service.unfollow(follower_id, user_id)

        return UnfollowResponse(
            status=outcome,
            follower_id=follower_id,
            followed_id=user_id
        )
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error unfollowing user: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unfollow user"
        )

@router.get("/{user_id}/followers", response_model=List[FollowListUser])
async def get_followers(
    user_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """Get followers of a user"""
    viewer_id = current_user.id if current_user else None
    try:
        follow_service = FollowService(db)
        return await follow_service.list_followers(user_id, viewer_id=viewer_id)
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error getting followers: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get followers"
        )

@router.get("/{user_id}/following", response_model=List[FollowListUser])
async def get_following(
    user_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """Get users that a user is following"""
    viewer_id = current_user.id if current_user else None
    try:
        follow_service = FollowService(db)
        return await follow_service.list_following(user_id, viewer_id=viewer_id)
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error getting following: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get following"
        )
