"""
Models package for Loopedia API
"""
from app.db.base import Base, BaseModel
from app.models.user import User
from app.models.preset import Preset
from app.models.comment import Comment
from app.models.like import Like
from app.models.bookmark import Bookmark
from app.models.follow import Follow
from app.models.contact import Contact, ContactReply
from app.models.notification import Notification

__all__ = [
    'Base',
    'BaseModel',
    'User',
    'Preset',
    'Comment',
    'Like',
    'Bookmark',
    'Follow',
    'Contact',
    'ContactReply',
    'Notification',
]
