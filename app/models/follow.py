from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Follow(BaseModel):
    __tablename__ = "user_follows"

    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    followed_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    follower = relationship(
        "User",
        foreign_keys=[follower_id],
        back_populates="following"
    )
    followed = relationship(
        "User",
        foreign_keys=[followed_id],
        back_populates="followers"
    )

    __table_args__ = (
        # At most one edge per ordered pair
        UniqueConstraint('follower_id', 'followed_id', name='follower_followed_unique'),
        CheckConstraint('follower_id <> followed_id', name='check_no_self_follow'),
        Index('ix_user_follows_follower_id', 'follower_id'),
        Index('ix_user_follows_followed_id', 'followed_id'),
        Index('ix_user_follows_created_at', 'created_at'),
    )
