from pydantic import Field

from app.schemas.base import APIModel
from app.schemas.user_schema import UserInDB

class Token(APIModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInDB

class TokenData(APIModel):
    username: str
    user_id: int

class ChangePasswordRequest(APIModel):
    """Schema for changing password"""
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(
        ...,
        min_length=6,
        max_length=100,
        description="New password"
    )
