from app.schemas.base import APIModel

class LikeToggleResponse(APIModel):
    preset_id: int
    liked: bool
    like_count: int

class BookmarkToggleResponse(APIModel):
    preset_id: int
    bookmarked: bool
