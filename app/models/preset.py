from sqlalchemy import Column, String, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Preset(BaseModel):
    __tablename__ = "presets"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)  # INPUT_FX, TRACK_FX, INPUT_TRACK_FX

    # Relationships
    user = relationship("User", back_populates="presets")
    comments = relationship("Comment", back_populates="preset", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="preset", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="preset", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_presets_user_id', 'user_id'),
        Index('ix_presets_created_at', 'created_at'),
    )
