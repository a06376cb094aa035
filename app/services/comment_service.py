from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
import logging

from app.models.comment import Comment
from app.schemas.notification_schema import NotificationRefs, NotificationType
from app.services.notification_service import NotificationService
from app.services.preset_service import PresetService
from app.utils.exceptions import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

class CommentService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.presets = PresetService(db)
        self.notifications = NotificationService(db)

    async def create_comment(self, preset_id: int, user_id: int, content: str) -> Comment:
        """Add a comment and notify the preset owner"""
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content is required")

        preset = await self.presets.get_preset(preset_id)
        owner_id = preset.user_id

        comment = Comment(preset_id=preset_id, user_id=user_id, content=content)
        try:
            self.db.add(comment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to create comment: {e}") from e

        comment_id = comment.id
        logger.info(f"User {user_id} commented on preset {preset_id}")

        await self.notifications.notify(
            recipient_id=owner_id,
            type=NotificationType.COMMENT,
            actor_id=user_id,
            refs=NotificationRefs(preset_id=preset_id, comment_id=comment_id)
        )

        return await self.get_comment(comment_id)

    async def get_comment(self, comment_id: int) -> Comment:
        stmt = select(Comment).where(
            Comment.id == comment_id
        ).options(
            selectinload(Comment.user)
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get_preset_comments(self, preset_id: int) -> List[Comment]:
        """Oldest first, with authors"""
        await self.presets.get_preset(preset_id)

        stmt = select(Comment).where(
            Comment.preset_id == preset_id
        ).options(
            selectinload(Comment.user)
        ).order_by(
            asc(Comment.created_at),
            asc(Comment.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
