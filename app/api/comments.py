from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from app.config import settings
from app.schemas.comment_schema import CommentCreate, CommentResponse
from app.services.comment_service import CommentService
from app.services.auth_service import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/{preset_id}/comments", response_model=List[CommentResponse])
async def get_preset_comments(
    preset_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Comments on a preset, oldest first"""
    return await CommentService(db).get_preset_comments(preset_id)

@router.post("/{preset_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.CONTENT_RATE_LIMIT)
async def create_comment(
    request: Request,
    preset_id: int,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Comment on a preset; the preset owner is notified"""
    user_id = current_user.id
    return await CommentService(db).create_comment(preset_id, user_id, comment_data.content)
