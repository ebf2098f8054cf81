from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.core.config import Settings
from pulse.db.database import get_async_session
from pulse.api.dependencies.auth import get_current_active_user
from pulse.api.dependencies.settings import get_app_settings
from pulse.models.user import User
from pulse.schemas.auth import UserRegister, UserLogin, UserResponse, AuthResponse
from pulse.schemas.response import ApiResponse, ok
from pulse.services.security_service import SecurityService
from pulse.services.user_service import UserService
from pulse.logs import debug_logger

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    Register a new user and return it with an access token
    """
    existing_user = await SecurityService.get_user_by_email(db, user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    user = await UserService.create(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    debug_logger.info(f"User registered: {user.id} ({user.email})")

    token = SecurityService.create_access_token(user, settings)
    return ok({"user": user, "token": token}, "User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    Exchange email and password for an access token
    """
    user = await SecurityService.authenticate_user(db, credentials.email, credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    token = SecurityService.create_access_token(user, settings)
    return ok({"user": user, "token": token}, "Login successful")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user)
):
    """
    Get current user information
    """
    return ok(current_user, "User retrieved successfully")
