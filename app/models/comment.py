from sqlalchemy import Column, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Comment(BaseModel):
    __tablename__ = "comments"

    preset_id = Column(Integer, ForeignKey("presets.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)

    # Relationships
    preset = relationship("Preset", back_populates="comments")
    user = relationship("User", back_populates="comments")

    __table_args__ = (
        Index('ix_comments_preset_id', 'preset_id'),
        Index('ix_comments_user_id', 'user_id'),
    )
