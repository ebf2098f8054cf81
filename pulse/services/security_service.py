from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from fastapi.concurrency import run_in_threadpool
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from pulse.core.config import Settings
from pulse.models.user import User

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class SecurityService:
    """Password hashing and JWT handling"""

    @staticmethod
    def create_password_hash(password: str, rounds: Optional[int] = None) -> str:
        """Create a hashed password, optionally with an explicit bcrypt cost"""
        context = pwd_context if rounds is None else pwd_context.copy(bcrypt__rounds=rounds)
        return context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            # Unknown or malformed hash
            return False

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """Get a user by email"""
        query = select(User).where(User.email == email)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        """Get a user by ID"""
        query = select(User).where(User.id == user_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str
    ) -> Optional[User]:
        """Authenticate a user by email and password"""
        user = await SecurityService.get_user_by_email(db, email)
        if not user or not user.hashed_password:
            return None

        # bcrypt is CPU bound, keep it off the event loop
        if not await run_in_threadpool(SecurityService.verify_password, password, user.hashed_password):
            return None

        return user

    @staticmethod
    def create_access_token(
        user: User,
        settings: Settings,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a JWT access token for a user"""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        expire = datetime.now(timezone.utc) + expires_delta

        role = user.role.value if hasattr(user.role, "value") else user.role
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "role": role,
            "type": "access",
            "exp": expire,
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def verify_token(token: str, settings: Settings, token_type: str = "access") -> Optional[Dict[str, Any]]:
        """Verify a JWT token and return its payload if valid"""
        try:
            # jose rejects expired tokens itself
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM]
            )
        except JWTError:
            return None

        if payload.get("type") != token_type:
            return None

        return payload

    @staticmethod
    async def get_current_user(
        db: AsyncSession,
        token: str,
        settings: Settings
    ) -> Optional[User]:
        """Get the current user from a JWT token"""
        payload = SecurityService.verify_token(token, settings)
        if not payload:
            return None

        user_id = payload.get("sub")
        if user_id is None:
            return None

        try:
            return await SecurityService.get_user_by_id(db, int(user_id))
        except ValueError:
            return None
