from typing import Dict, List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
import logging

from app.models.bookmark import Bookmark
from app.models.comment import Comment
from app.models.like import Like
from app.models.notification import Notification
from app.models.preset import Preset
from app.models.user import User
from app.schemas.preset_schema import PresetCreate, PresetResponse, PresetUpdate
from app.utils.exceptions import AuthorizationError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

class PresetService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_preset(self, user_id: int, preset_data: PresetCreate) -> Preset:
        preset = Preset(
            user_id=user_id,
            name=preset_data.name,
            type=preset_data.type.value
        )
        try:
            self.db.add(preset)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to create preset: {e}") from e

        logger.info(f"User {user_id} created preset {preset.id}")
        return preset

    async def get_preset(self, preset_id: int) -> Preset:
        stmt = select(Preset).where(
            Preset.id == preset_id
        ).options(
            selectinload(Preset.user)
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        preset = result.scalar_one_or_none()
        if not preset:
            raise NotFoundError("Preset not found")
        return preset

    async def get_preset_details(self, preset_id: int, viewer_id: Optional[int] = None) -> PresetResponse:
        """Preset with like/comment counts and the viewer's like/bookmark state"""
        preset = await self.get_preset(preset_id)
        response = PresetResponse.model_validate(preset)

        response.like_count = await self.count_related(Like, preset_id)
        response.comment_count = await self.count_related(Comment, preset_id)
        if viewer_id is not None:
            response.is_liked = await self.has_related(Like, preset_id, viewer_id)
            response.is_bookmarked = await self.has_related(Bookmark, preset_id, viewer_id)
        return response

    async def list_presets(
        self,
        user_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        viewer_id: Optional[int] = None
    ) -> List[PresetResponse]:
        """Newest first, optionally narrowed to one owner or a name search"""
        stmt = select(Preset).options(
            selectinload(Preset.user)
        ).order_by(
            desc(Preset.created_at),
            desc(Preset.id)
        )
        if user_id is not None:
            stmt = stmt.where(Preset.user_id == user_id)
        if search:
            stmt = stmt.where(Preset.name.ilike(f"%{search}%"))
        stmt = stmt.offset((page - 1) * limit).limit(limit)

        result = await self.db.execute(stmt)
        presets = list(result.scalars().all())
        preset_ids = [preset.id for preset in presets]

        like_counts = await self._counts_by_preset(Like, preset_ids)
        comment_counts = await self._counts_by_preset(Comment, preset_ids)
        liked = await self._viewer_preset_ids(Like, preset_ids, viewer_id)
        bookmarked = await self._viewer_preset_ids(Bookmark, preset_ids, viewer_id)

        responses = []
        for preset in presets:
            response = PresetResponse.model_validate(preset)
            response.like_count = like_counts.get(preset.id, 0)
            response.comment_count = comment_counts.get(preset.id, 0)
            response.is_liked = preset.id in liked
            response.is_bookmarked = preset.id in bookmarked
            responses.append(response)
        return responses

    async def update_preset(self, preset_id: int, user: User, preset_data: PresetUpdate) -> PresetResponse:
        """Rename a preset; only its owner may do so"""
        user_id = user.id
        preset = await self.get_preset(preset_id)
        if preset.user_id != user_id:
            raise AuthorizationError("Cannot edit another user's preset")

        preset.name = preset_data.name
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to update preset: {e}") from e

        logger.info(f"User {user_id} renamed preset {preset_id}")
        return await self.get_preset_details(preset_id, viewer_id=user_id)

    async def delete_preset(self, preset_id: int, user: User) -> None:
        preset = await self.get_preset(preset_id)
        if preset.user_id != user.id and not user.is_admin:
            raise AuthorizationError("Cannot delete another user's preset")

        # Dependents are removed explicitly; SQLite does not enforce ON DELETE
        try:
            for model in (Notification, Comment, Like, Bookmark):
                await self.db.execute(delete(model).where(model.preset_id == preset_id))
            await self.db.execute(delete(Preset).where(Preset.id == preset_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to delete preset: {e}") from e
        logger.info(f"User {user.id} deleted preset {preset_id}")

    async def count_related(self, model, preset_id: int) -> int:
        stmt = select(func.count()).select_from(model).where(model.preset_id == preset_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def has_related(self, model, preset_id: int, user_id: int) -> bool:
        stmt = select(model.id).where(
            and_(model.preset_id == preset_id, model.user_id == user_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _counts_by_preset(self, model, preset_ids: List[int]) -> Dict[int, int]:
        if not preset_ids:
            return {}
        stmt = select(model.preset_id, func.count()).where(
            model.preset_id.in_(preset_ids)
        ).group_by(model.preset_id)
        result = await self.db.execute(stmt)
        return {preset_id: count for preset_id, count in result.all()}

    async def _viewer_preset_ids(self, model, preset_ids: List[int], viewer_id: Optional[int]) -> Set[int]:
        if viewer_id is None or not preset_ids:
            return set()
        stmt = select(model.preset_id).where(
            and_(model.user_id == viewer_id, model.preset_id.in_(preset_ids))
        )
        result = await self.db.execute(stmt)
        return set(result.scalars().all())
