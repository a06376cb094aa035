from sqlalchemy import Column, String, Integer, ForeignKey, Boolean, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Notification(BaseModel):
    __tablename__ = "notifications"

    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type = Column(String(20), nullable=False)  # like, comment, follow, contact_reply
    preset_id = Column(Integer, ForeignKey("presets.id", ondelete="CASCADE"), nullable=True)
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=True)
    read = Column(Boolean, default=False, nullable=False)

    # Relationships
    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="received_notifications")
    actor = relationship("User", foreign_keys=[actor_id])

    __table_args__ = (
        Index('ix_notifications_recipient_read', 'recipient_id', 'read'),
        Index('ix_notifications_recipient_created', 'recipient_id', 'created_at'),
    )
