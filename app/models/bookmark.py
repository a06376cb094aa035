from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Bookmark(BaseModel):
    __tablename__ = "bookmarks"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    preset_id = Column(Integer, ForeignKey("presets.id", ondelete="CASCADE"), nullable=False)

    user = relationship("User", back_populates="bookmarks")
    preset = relationship("Preset", back_populates="bookmarks")

    __table_args__ = (
        UniqueConstraint('user_id', 'preset_id', name='unique_bookmark'),
        Index('ix_bookmarks_user_id', 'user_id'),
    )
