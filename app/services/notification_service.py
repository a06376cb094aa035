from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, update, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
import logging

from app.models.notification import Notification
from app.schemas.notification_schema import NotificationRefs, NotificationType
from app.utils.exceptions import (
    AuthorizationError,
    LoopediaError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Which subject references each notification type carries
REQUIRED_REFS = {
    NotificationType.LIKE: {"preset_id"},
    NotificationType.COMMENT: {"preset_id", "comment_id"},
    NotificationType.FOLLOW: set(),
    NotificationType.CONTACT_REPLY: {"contact_id"},
}

def validate_refs(type: NotificationType, refs: NotificationRefs) -> None:
    """Reject references that do not match the notification type"""
    required = REQUIRED_REFS[type]
    present = {name for name, value in refs.model_dump().items() if value is not None}

    missing = required - present
    if missing:
        raise ValidationError(f"{type.value} notification requires {', '.join(sorted(missing))}")

    unexpected = present - required
    if unexpected:
        raise ValidationError(f"{type.value} notification does not take {', '.join(sorted(unexpected))}")

class NotificationService:
    """Notification records and their read state.

    Unread counts are always derived from the table; nothing is counted
    ahead of time, so the number can never drift from the rows.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_notification(
        self,
        recipient_id: int,
        type: NotificationType,
        actor_id: Optional[int] = None,
        refs: Optional[NotificationRefs] = None
    ) -> Notification:
        """Insert an unread notification; failures raise PersistenceError"""
        refs = refs or NotificationRefs()
        validate_refs(type, refs)

        notification = Notification(
            recipient_id=recipient_id,
            actor_id=actor_id,
            type=type.value,
            preset_id=refs.preset_id,
            comment_id=refs.comment_id,
            contact_id=refs.contact_id,
            read=False
        )

        try:
            self.db.add(notification)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Could not create {type.value} notification: {e}") from e

        logger.info(f"Created {type.value} notification {notification.id} for user {recipient_id}")
        return notification

    async def notify(
        self,
        recipient_id: int,
        type: NotificationType,
        actor_id: Optional[int] = None,
        refs: Optional[NotificationRefs] = None
    ) -> Optional[Notification]:
        """Best-effort side effect of a like, comment, follow or contact reply.

        Self-notifications are suppressed. Failures are logged and swallowed
        so the triggering action still succeeds.
        """
        if actor_id is not None and actor_id == recipient_id:
            return None

        try:
            return await self.create_notification(recipient_id, type, actor_id, refs)
        except LoopediaError as e:
            logger.warning(f"Dropped {type.value} notification for user {recipient_id}: {e.message}")
            return None

    async def list_notifications(self, recipient_id: int, limit: int = 20) -> List[Notification]:
        """Newest first, with the actor loaded for display"""
        stmt = select(Notification).where(
            Notification.recipient_id == recipient_id
        ).options(
            selectinload(Notification.actor)
        ).order_by(
            desc(Notification.created_at),
            desc(Notification.id)
        ).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def unread_count(self, recipient_id: int) -> int:
        """Get count of unread notifications for a user"""
        stmt = select(func.count()).select_from(Notification).where(
            and_(
                Notification.recipient_id == recipient_id,
                Notification.read.is_(False)
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def mark_read(self, notification_id: int, requester_id: int) -> Notification:
        """Mark one notification read; only its recipient may do so"""
        stmt = select(Notification).where(
            Notification.id == notification_id
        ).options(
            selectinload(Notification.actor)
        )
        result = await self.db.execute(stmt)
        notification = result.scalar_one_or_none()

        if not notification:
            raise NotFoundError("Notification not found")

        if notification.recipient_id != requester_id:
            logger.warning(
                f"User {requester_id} tried to mark notification {notification_id} "
                f"of user {notification.recipient_id} as read"
            )
            raise AuthorizationError("Cannot modify another user's notification")

        if not notification.read:
            notification.read = True
            try:
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise PersistenceError(f"Could not mark notification as read: {e}") from e
            logger.info(f"Marked notification {notification_id} as read for user {requester_id}")

        return notification

    async def mark_all_read(self, recipient_id: int) -> int:
        """Mark every unread notification read; returns how many changed"""
        stmt = update(Notification).where(
            and_(
                Notification.recipient_id == recipient_id,
                Notification.read.is_(False)
            )
        ).values(read=True)

        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Could not mark notifications as read: {e}") from e

        updated_count = result.rowcount
        if updated_count:
            logger.info(f"Marked {updated_count} notifications as read for user {recipient_id}")
        return updated_count
