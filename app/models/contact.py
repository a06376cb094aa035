from sqlalchemy import Column, String, Text, Integer, ForeignKey, Boolean, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import BaseModel

class Contact(BaseModel):
    __tablename__ = "contacts"

    # Set only when submitted by a logged-in user
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(100), nullable=False)
    contact_method = Column(String(20))  # email, twitter, other
    contact_detail = Column(String(255))
    category = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), default="new", nullable=False)  # new, in_progress, resolved
    is_anonymous = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    replies = relationship(
        "ContactReply",
        back_populates="contact",
        cascade="all, delete-orphan",
        order_by="ContactReply.created_at"
    )

    __table_args__ = (
        Index('ix_contacts_user_id', 'user_id'),
        Index('ix_contacts_created_at', 'created_at'),
    )

class ContactReply(BaseModel):
    __tablename__ = "contact_replies"

    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    reply = Column(Text, nullable=False)

    contact = relationship("Contact", back_populates="replies")
