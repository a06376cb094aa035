from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from app.config import settings
from app.schemas.notification_schema import MarkAllReadResponse, NotificationResponse
from app.services.notification_service import NotificationService
from app.services.auth_service import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.utils.exceptions import LoopediaError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    limit: int = Query(settings.NOTIFICATION_DEFAULT_LIMIT, ge=1, le=settings.NOTIFICATION_MAX_LIMIT),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current user's notifications, newest first"""
    try:
        service = NotificationService(db)
        return await service.list_notifications(current_user.id, limit=limit)
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Error getting notifications: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get notifications"
        )

@router.get("/unread-count", response_model=int)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Number of unread notifications"""
    try:
        service = NotificationService(db)
        return await service.unread_count(current_user.id)
    except Exception as e:
        logger.error(f"Error getting unread count: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get unread count"
        )

@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_as_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Mark all notifications as read"""
    service = NotificationService(db)
    count = await service.mark_all_read(current_user.id)
    return MarkAllReadResponse(
        message=f"Marked {count} notifications as read",
        updated=count
    )

@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Mark a notification as read"""
    service = NotificationService(db)
    return await service.mark_read(notification_id, current_user.id)
