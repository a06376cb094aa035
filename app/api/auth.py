from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.schemas.auth_schema import ChangePasswordRequest, Token
from app.schemas.user_schema import UserCreate, UserInDB
from app.services.auth_service import AuthService, get_current_user, oauth2_scheme
from app.db.session import get_db
from app.models.user import User
from app.utils.exceptions import LoopediaError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=UserInDB, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user"""
    try:
        auth_service = AuthService(db)
        return await auth_service.create_user(user_data)
    except (HTTPException, LoopediaError):
        raise
    except Exception as e:
        logger.error(f"Registration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """Login user and return an access token"""
    auth_service = AuthService(db)

    user = await auth_service.authenticate_user(
        form_data.username,
        form_data.password
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"User {user.username} (id: {user.id}) logged in")
    return Token(
        access_token=auth_service.create_token_for_user(user),
        user=UserInDB.model_validate(user)
    )

@router.post("/logout")
async def logout(
    token: str = Depends(oauth2_scheme),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Invalidate the presented access token"""
    await AuthService(db).blacklist_token(token)
    logger.info(f"User {current_user.id} logged out")
    return {"message": "Logged out"}

@router.get("/me", response_model=UserInDB)
async def read_me(current_user: User = Depends(get_current_user)):
    """Get the current user"""
    return current_user

@router.post("/change-password")
async def change_password(
    password_data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the current user's password"""
    await AuthService(db).change_password(
        current_user,
        password_data.current_password,
        password_data.new_password
    )
    return {"message": "Password changed"}
