from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from app.config import settings
from app.schemas.preset_schema import PresetCreate, PresetResponse, PresetUpdate
from app.services.preset_service import PresetService
from app.services.auth_service import get_current_user, get_current_user_optional
from app.db.session import get_db
from app.models.user import User
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=PresetResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.CONTENT_RATE_LIMIT)
async def create_preset(
    request: Request,
    preset_data: PresetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a preset owned by the current user"""
    user_id = current_user.id
    service = PresetService(db)
    preset = await service.create_preset(user_id, preset_data)
    return await service.get_preset_details(preset.id, viewer_id=user_id)

@router.get("", response_model=List[PresetResponse])
async def list_presets(
    user_id: Optional[int] = Query(None, alias="userId"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """Presets, newest first; filter by owner with userId"""
    viewer_id = current_user.id if current_user else None
    return await PresetService(db).list_presets(
        user_id=user_id,
        search=search,
        page=page,
        limit=limit,
        viewer_id=viewer_id
    )

@router.get("/{preset_id}", response_model=PresetResponse)
async def get_preset(
    preset_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db)
):
    """Get a preset with its like/comment counts"""
    viewer_id = current_user.id if current_user else None
    return await PresetService(db).get_preset_details(preset_id, viewer_id=viewer_id)

@router.patch("/{preset_id}", response_model=PresetResponse)
async def update_preset(
    preset_id: int,
    preset_data: PresetUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Rename a preset (owner only)"""
    return await PresetService(db).update_preset(preset_id, current_user, preset_data)

@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_preset(
    preset_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a preset (owner or administrator)"""
    await PresetService(db).delete_preset(preset_id, current_user)
