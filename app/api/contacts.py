from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from app.config import settings
from app.schemas.contact_schema import (
    ContactCreate,
    ContactDetailResponse,
    ContactReplyCreate,
    ContactReplyResponse,
    ContactResponse,
    ContactStatusUpdate
)
from app.services.contact_service import ContactService
from app.services.auth_service import get_current_admin, get_current_user, get_current_user_optional
from app.db.session import get_db
from app.models.user import User
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.CONTENT_RATE_LIMIT)
async def create_contact(
    request: Request,
    contact_data: ContactCreate,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """Submit a support request; logged-in users are linked to it"""
    user_id = current_user.id if current_user else None
    return await ContactService(db).create_contact(contact_data, user_id=user_id)

@router.get("", response_model=List[ContactResponse])
async def get_all_contacts(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """All support requests, newest first (administrators)"""
    return await ContactService(db).get_all_contacts()

@router.get("/my", response_model=List[ContactResponse])
async def get_my_contacts(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Support requests submitted by the current user"""
    return await ContactService(db).get_user_contacts(current_user.id)

@router.get("/{contact_id}", response_model=ContactDetailResponse)
async def get_contact(
    contact_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """A support request with its replies"""
    return await ContactService(db).get_contact_for_user(contact_id, current_user)

@router.post("/{contact_id}/reply", response_model=ContactReplyResponse, status_code=status.HTTP_201_CREATED)
async def reply_to_contact(
    contact_id: int,
    reply_data: ContactReplyCreate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Reply to a support request (administrators)"""
    return await ContactService(db).reply(contact_id, reply_data.reply)

@router.patch("/{contact_id}/status", response_model=ContactResponse)
async def update_contact_status(
    contact_id: int,
    status_update: ContactStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Move a support request between new, in_progress and resolved (administrators)"""
    return await ContactService(db).update_status(contact_id, status_update.status)
