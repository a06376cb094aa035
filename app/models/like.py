from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Like(BaseModel):
    __tablename__ = "likes"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    preset_id = Column(Integer, ForeignKey("presets.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    user = relationship("User", back_populates="likes")
    preset = relationship("Preset", back_populates="likes")

    __table_args__ = (
        UniqueConstraint('user_id', 'preset_id', name='unique_like'),
        Index('ix_likes_preset_id', 'preset_id'),
    )
