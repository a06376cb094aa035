from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
import logging

from app.models.contact import Contact, ContactReply
from app.models.user import User
from app.schemas.contact_schema import ContactCreate, ContactStatus
from app.schemas.notification_schema import NotificationRefs, NotificationType
from app.services.notification_service import NotificationService
from app.utils.exceptions import AuthorizationError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

class ContactService:
    """Support requests and administrator replies.

    Replying moves a ``new`` contact to ``in_progress`` and, when the
    contact came from a registered user, sends them a contact_reply
    notification.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def create_contact(self, contact_data: ContactCreate, user_id: Optional[int] = None) -> Contact:
        contact = Contact(
            user_id=user_id,
            name=contact_data.name,
            contact_method=contact_data.contact_method.value if contact_data.contact_method else None,
            contact_detail=contact_data.contact_detail,
            category=contact_data.category.value,
            message=contact_data.message,
            status=ContactStatus.NEW.value,
            is_anonymous=contact_data.is_anonymous or user_id is None
        )
        try:
            self.db.add(contact)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to create contact: {e}") from e

        logger.info(f"Created contact {contact.id} ({contact.category}) from user {user_id}")
        return contact

    async def get_contact(self, contact_id: int) -> Contact:
        stmt = select(Contact).where(
            Contact.id == contact_id
        ).options(
            selectinload(Contact.replies)
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        contact = result.scalar_one_or_none()
        if not contact:
            raise NotFoundError("Contact not found")
        return contact

    async def get_contact_for_user(self, contact_id: int, user: User) -> Contact:
        """Owners and administrators may read a contact and its replies"""
        contact = await self.get_contact(contact_id)
        if not user.is_admin and contact.user_id != user.id:
            raise AuthorizationError("Cannot view another user's contact")
        return contact

    async def get_user_contacts(self, user_id: int) -> List[Contact]:
        stmt = select(Contact).where(
            Contact.user_id == user_id
        ).order_by(
            desc(Contact.created_at),
            desc(Contact.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_all_contacts(self) -> List[Contact]:
        stmt = select(Contact).order_by(desc(Contact.created_at), desc(Contact.id))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_status(self, contact_id: int, status: ContactStatus) -> Contact:
        contact = await self.get_contact(contact_id)
        contact.status = status.value
        contact.updated_at = datetime.utcnow()
        await self.db.commit()

        logger.info(f"Contact {contact_id} moved to {status.value}")
        return contact

    async def reply(self, contact_id: int, reply_text: str) -> ContactReply:
        """Record an administrator reply and notify the submitter"""
        reply_text = (reply_text or "").strip()
        if not reply_text:
            raise ValidationError("Reply text is required")

        contact = await self.get_contact(contact_id)
        recipient_id = contact.user_id

        reply = ContactReply(contact_id=contact_id, reply=reply_text)
        try:
            self.db.add(reply)
            if contact.status == ContactStatus.NEW.value:
                contact.status = ContactStatus.IN_PROGRESS.value
            contact.updated_at = datetime.utcnow()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to reply to contact: {e}") from e

        reply_id = reply.id
        logger.info(f"Replied to contact {contact_id}")

        if recipient_id is not None:
            await self.notifications.notify(
                recipient_id=recipient_id,
                type=NotificationType.CONTACT_REPLY,
                refs=NotificationRefs(contact_id=contact_id)
            )

        stmt = select(ContactReply).where(ContactReply.id == reply_id)
        result = await self.db.execute(stmt)
        return result.scalar_one()
