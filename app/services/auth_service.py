from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.config import settings
from app.schemas.auth_schema import TokenData
from app.schemas.user_schema import UserCreate
from app.models.user import User
from app.db.session import get_db
from app.services.redis_service import RedisService
from app.utils.exceptions import AuthenticationError, AuthorizationError, ValidationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login",
    auto_error=False
)

class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.redis = RedisService()

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return pwd_context.hash(password)

    async def create_user(self, user_data: UserCreate, is_admin: bool = False) -> User:
        """Create a new user"""
        existing = await self.get_user_by_username(user_data.username)
        if existing:
            raise ValidationError("Username already taken")

        user = User(
            username=user_data.username,
            nickname=user_data.nickname,
            hashed_password=self.get_password_hash(user_data.password),
            is_active=True,
            is_verified=False,
            is_admin=is_admin
        )

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError("Username already taken")
        await self.db.refresh(user)

        logger.info(f"Registered user {user.username} (id: {user.id})")
        return user

    async def get_user_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """Authenticate a user"""
        user = await self.get_user_by_username(username)

        if not user or not self.verify_password(password, user.hashed_password):
            logger.info(f"Authentication failed for user {username}")
            return None

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inactive user"
            )

        return user

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not self.verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Current password is incorrect")

        user.hashed_password = self.get_password_hash(new_password)
        await self.db.commit()
        logger.info(f"Password changed for user {user.id}")

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token"""
        to_encode = data.copy()

        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        to_encode.update({"exp": expire, "type": "access"})
        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.ALGORITHM)

    def create_token_for_user(self, user: User) -> str:
        return self.create_access_token({"sub": user.username, "user_id": user.id})

    async def verify_token(self, token: str) -> Optional[TokenData]:
        """Verify a JWT token"""
        try:
            # Check if token is blacklisted
            if await self.redis.get(f"blacklist:{token}"):
                return None

            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.ALGORITHM])

            if payload.get("type") != "access":
                return None

            username: str = payload.get("sub")
            user_id: int = payload.get("user_id")

            if username is None or user_id is None:
                return None

            return TokenData(username=username, user_id=user_id)
        except JWTError:
            return None

    async def blacklist_token(self, token: str, expires_in: int = None) -> None:
        """Add token to blacklist"""
        expires_in = expires_in or settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        await self.redis.setex(f"blacklist:{token}", expires_in, "1")

async def _resolve_user(token: str, db: AsyncSession) -> Optional[User]:
    auth_service = AuthService(db)
    token_data = await auth_service.verify_token(token)

    if token_data is None:
        return None

    stmt = select(User).where(User.id == token_data.user_id)
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        return None
    return user

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Dependency to get current authenticated user"""
    user = await _resolve_user(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def get_current_user_optional(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous viewers resolve to None"""
    if not token:
        return None
    return await _resolve_user(token, db)

async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Administrative rights come from the is_admin column only"""
    if not current_user.is_admin:
        logger.warning(f"Non-admin user {current_user.id} attempted an admin action")
        raise AuthorizationError("Administrator privileges required")
    return current_user
