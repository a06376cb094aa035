from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
import logging

from app.models.bookmark import Bookmark
from app.models.like import Like
from app.models.preset import Preset
from app.schemas.notification_schema import NotificationRefs, NotificationType
from app.services.notification_service import NotificationService
from app.services.preset_service import PresetService
from app.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)

class LikeService:
    """Likes and bookmarks on presets.

    Both are unique per (user, preset). Only a newly created like notifies
    the preset owner; bookmarks never notify.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.presets = PresetService(db)
        self.notifications = NotificationService(db)

    async def like_preset(self, preset_id: int, user_id: int) -> bool:
        """Returns True if a like was created, False if it already existed"""
        preset = await self.presets.get_preset(preset_id)
        owner_id = preset.user_id

        created = await self._insert(Like(user_id=user_id, preset_id=preset_id))
        if not created:
            return False

        logger.info(f"User {user_id} liked preset {preset_id}")
        await self.notifications.notify(
            recipient_id=owner_id,
            type=NotificationType.LIKE,
            actor_id=user_id,
            refs=NotificationRefs(preset_id=preset_id)
        )
        return True

    async def unlike_preset(self, preset_id: int, user_id: int) -> bool:
        """Returns True if a like was removed"""
        await self.presets.get_preset(preset_id)
        removed = await self._delete(Like, preset_id, user_id)
        if removed:
            logger.info(f"User {user_id} unliked preset {preset_id}")
        return removed

    async def toggle_like(self, preset_id: int, user_id: int) -> Tuple[bool, int]:
        """Flip the like state; returns (liked, like_count)"""
        if await self.presets.has_related(Like, preset_id, user_id):
            await self.unlike_preset(preset_id, user_id)
            liked = False
        else:
            await self.like_preset(preset_id, user_id)
            liked = True
        return liked, await self.count_likes(preset_id)

    async def count_likes(self, preset_id: int) -> int:
        return await self.presets.count_related(Like, preset_id)

    async def toggle_bookmark(self, preset_id: int, user_id: int) -> bool:
        """Flip the bookmark state; returns whether it is now bookmarked"""
        await self.presets.get_preset(preset_id)

        if await self._delete(Bookmark, preset_id, user_id):
            logger.info(f"User {user_id} removed bookmark on preset {preset_id}")
            return False

        await self._insert(Bookmark(user_id=user_id, preset_id=preset_id))
        logger.info(f"User {user_id} bookmarked preset {preset_id}")
        return True

    async def get_bookmarked_presets(self, user_id: int) -> List[Preset]:
        stmt = select(Preset).join(
            Bookmark, Bookmark.preset_id == Preset.id
        ).where(
            Bookmark.user_id == user_id
        ).options(
            selectinload(Preset.user)
        ).order_by(
            desc(Bookmark.created_at),
            desc(Bookmark.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _insert(self, row) -> bool:
        """Insert a unique row; False when an identical row already exists"""
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return False
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to save {row.__tablename__}: {e}") from e
        return True

    async def _delete(self, model, preset_id: int, user_id: int) -> bool:
        stmt = delete(model).where(
            and_(model.preset_id == preset_id, model.user_id == user_id)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to delete {model.__tablename__}: {e}") from e
        return bool(result.rowcount)
