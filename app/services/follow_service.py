from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, desc, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from app.models.follow import Follow
from app.models.user import User
from app.schemas.follow_schema import FollowOutcome, UnfollowOutcome
from app.schemas.notification_schema import NotificationType
from app.schemas.user_schema import FollowListUser
from app.services.notification_service import NotificationService
from app.utils.cache import FollowListCache, followers_key, following_key
from app.utils.exceptions import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

class FollowService:
    """Directed follow edges between users.

    follow/unfollow are idempotent: repeating either converges on the same
    state and reports what happened instead of failing. The unique
    constraint on (follower_id, followed_id) settles concurrent follows.
    """

    def __init__(self, db: AsyncSession, cache: Optional[FollowListCache] = None):
        self.db = db
        self.cache = cache or FollowListCache()
        self.notifications = NotificationService(db)

    async def follow(self, follower_id: int, followed_id: int) -> Tuple[Follow, FollowOutcome]:
        """Create the edge follower -> followed, or report that it exists"""
        if follower_id == followed_id:
            raise ValidationError("Cannot follow yourself")

        await self._require_user(followed_id)

        existing = await self.get_follow_relationship(follower_id, followed_id)
        if existing:
            logger.debug(f"Follow {follower_id} -> {followed_id} already exists")
            return existing, FollowOutcome.ALREADY_EXISTED

        follow = Follow(follower_id=follower_id, followed_id=followed_id)
        self.db.add(follow)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with an identical follow; the winner's edge stands
            await self.db.rollback()
            existing = await self.get_follow_relationship(follower_id, followed_id)
            if existing is None:
                raise PersistenceError("Failed to follow user")
            return existing, FollowOutcome.ALREADY_EXISTED
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to follow user: {e}") from e

        logger.info(f"Created follow: {follower_id} -> {followed_id}")

        await self.cache.invalidate_edge(follower_id, followed_id)
        await self.notifications.notify(
            recipient_id=followed_id,
            type=NotificationType.FOLLOW,
            actor_id=follower_id
        )

        # A failed notification rolls the session back and expires the edge
        await self.db.refresh(follow)
        return follow, FollowOutcome.CREATED

    async def unfollow(self, follower_id: int, followed_id: int) -> UnfollowOutcome:
        """Delete the edge if present; a missing edge is not an error"""
        await self._require_user(followed_id)

        stmt = delete(Follow).where(
            and_(
                Follow.follower_id == follower_id,
                Follow.followed_id == followed_id
            )
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to unfollow user: {e}") from e

        if not result.rowcount:
            return UnfollowOutcome.DID_NOT_EXIST

        logger.info(f"Deleted follow: {follower_id} -> {followed_id}")
        await self.cache.invalidate_edge(follower_id, followed_id)
        return UnfollowOutcome.DELETED

    async def get_follow_relationship(
        self,
        follower_id: int,
        followed_id: int
    ) -> Optional[Follow]:
        """Get follow relationship between two users"""
        stmt = select(Follow).where(
            and_(
                Follow.follower_id == follower_id,
                Follow.followed_id == followed_id
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def is_following(self, viewer_id: Optional[int], target_id: int) -> bool:
        """Anonymous viewers and self-lookups are False without touching the database"""
        if viewer_id is None or viewer_id == target_id:
            return False
        return await self.get_follow_relationship(viewer_id, target_id) is not None

    async def list_followers(self, user_id: int, viewer_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Users following ``user_id``, newest edge first"""
        await self._require_user(user_id)

        key = followers_key(user_id)
        user_ids = await self.cache.get(key)
        if user_ids is None:
            user_ids = await self._load_ids(Follow.follower_id, Follow.followed_id == user_id)
            await self.cache.set(key, user_ids)

        return await self._annotate(await self._load_users(user_ids), viewer_id)

    async def list_following(self, user_id: int, viewer_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Users ``user_id`` follows, newest edge first"""
        await self._require_user(user_id)

        key = following_key(user_id)
        user_ids = await self.cache.get(key)
        if user_ids is None:
            user_ids = await self._load_ids(Follow.followed_id, Follow.follower_id == user_id)
            await self.cache.set(key, user_ids)

        return await self._annotate(await self._load_users(user_ids), viewer_id)

    async def count_followers(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Follow).where(Follow.followed_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def count_following(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def _load_ids(self, user_column, condition) -> List[int]:
        """Ordered ids on one side of the matching edges"""
        stmt = select(user_column).where(
            condition
        ).order_by(
            desc(Follow.created_at),
            desc(Follow.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _load_users(self, user_ids: List[int]) -> List[Dict[str, Any]]:
        """Current profile rows for ``user_ids``, keeping their order"""
        if not user_ids:
            return []

        stmt = select(User).where(
            User.id.in_(user_ids)
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        users = {user.id: user for user in result.scalars().all()}

        return [
            FollowListUser.model_validate(users[user_id]).model_dump()
            for user_id in user_ids
            if user_id in users
        ]

    async def _annotate(self, users: List[Dict[str, Any]], viewer_id: Optional[int]) -> List[Dict[str, Any]]:
        """Set is_following per row relative to the viewer"""
        followed_ids = set()
        if viewer_id is not None and users:
            stmt = select(Follow.followed_id).where(
                and_(
                    Follow.follower_id == viewer_id,
                    Follow.followed_id.in_([user["id"] for user in users])
                )
            )
            result = await self.db.execute(stmt)
            followed_ids = set(result.scalars().all())

        return [
            {**user, "is_following": user["id"] in followed_ids and user["id"] != viewer_id}
            for user in users
        ]

    async def _require_user(self, user_id: int) -> None:
        stmt = select(User.id).where(User.id == user_id)
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise NotFoundError("User not found")
