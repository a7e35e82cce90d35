# app/api/routes/auth.py

from fastapi import APIRouter, Depends
from fastapi_users import FastAPIUsers
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from schemas.user_schema import UserRead, UserCreate, UserUpdate, UserMe
from services.user_manager import get_user_manager
from services.user_status_service import UserStatusService
from infrastructure.auth_config import auth_backend
from infrastructure.postgres_connection import get_db_session


fastapi_users = FastAPIUsers[RegisteredUser, int](
    get_user_manager=get_user_manager,
    auth_backends=[auth_backend],
)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])
users_router = APIRouter(prefix="/users", tags=["Users"])

# Login and logout
auth_router.include_router(
    fastapi_users.get_auth_router(auth_backend),
)

auth_router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
)

# Resolves the session cookie to the calling user for every protected route
current_active_user = fastapi_users.current_user(active=True)


@users_router.get("/me", response_model=UserMe)
async def get_me(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get your own profile together with your current status.
    """
    snapshot = await UserStatusService.current_status(session, current_user.id)
    return UserMe(
        id=current_user.id,
        email=current_user.email,
        username=current_user.username,
        avatar_url=current_user.avatar_url,
        is_active=current_user.is_active,
        is_superuser=current_user.is_superuser,
        is_verified=current_user.is_verified,
        status_type=snapshot.status_type,
        status_text=snapshot.status_text,
    )


# Profile updates for the current user; registered after /me so the custom GET wins
users_router.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
)
