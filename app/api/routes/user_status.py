# app/api/routes/user_status.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from schemas.user_status_schema import (
    StatusUpdateRequest,
    StatusUpdateResponse,
    PresenceSnapshot,
    FriendPresenceGroups,
)
from services.user_status_service import UserStatusService
from infrastructure.postgres_connection import get_db_session
from api.routes.auth import current_active_user


router = APIRouter(prefix="/status", tags=["User Status"])


@router.put("", response_model=StatusUpdateResponse)
async def update_status(
    status_data: StatusUpdateRequest,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Publish a new status.

    - **status_type**: online, away, busy, brb, phone, lunch, offline or appear_offline
    - **status_text**: up to 128 characters, may be empty
    """
    return await UserStatusService.append_status_event(
        session,
        current_user.id,
        status_data.status_type,
        status_data.status_text
    )


@router.get("/me", response_model=PresenceSnapshot)
async def get_my_status(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get your own current status as seen by your friends.
    """
    return await UserStatusService.current_status(session, current_user.id)


@router.get("/friends", response_model=FriendPresenceGroups)
async def get_friends_statuses(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get all friends grouped into online, away and offline.

    Clients poll this endpoint; there is no push channel.
    """
    friends = await UserStatusService.friends_with_presence(session, current_user.id)
    return UserStatusService.group_by_bucket(friends)


@router.get("/users/{user_id}", response_model=PresenceSnapshot)
async def get_user_status(
    user_id: int,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get the current status of a specific user.

    **Authorization**: You can only query the status of users who are your friends.

    Raises:
        403: If the requested user is not your friend
    """
    return await UserStatusService.get_friend_status(session, current_user.id, user_id)
