"""
User Service for handling user-related business logic
"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.user import User
from app.schemas.user_schema import UserPublic, UserUpdate
from app.services.follow_service import FollowService
from app.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.follow_service = FollowService(db)

    async def get_user(self, user_id: int) -> User:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_profile(self, user_id: int, viewer_id: Optional[int] = None) -> UserPublic:
        """Public profile with derived follow counts and the viewer's follow status"""
        user = await self.get_user(user_id)

        profile = UserPublic.model_validate(user)
        profile.followers_count = await self.follow_service.count_followers(user_id)
        profile.following_count = await self.follow_service.count_following(user_id)
        profile.is_following = await self.follow_service.is_following(viewer_id, user_id)
        return profile

    async def update_profile(self, user: User, user_data: UserUpdate) -> User:
        """Apply only the fields present in the request"""
        for field, value in user_data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)

        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Updated profile of user {user.id}")
        return user
