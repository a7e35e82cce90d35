# app/api/routes/friendship.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from schemas.friendship_schema import (
    FriendRequestCreate,
    FriendRequestCreated,
    FriendRequestAccept,
    FriendshipRemove,
    FriendshipResponse,
    PendingRequestsResponse,
    UserSearchResponse,
)
from schemas.user_status_schema import FriendListResponse
from services.friendship_service import FriendshipService
from services.user_status_service import UserStatusService
from infrastructure.postgres_connection import get_db_session
from api.routes.auth import current_active_user


friendship_router = APIRouter(prefix="/friends", tags=["Friendships"])


@friendship_router.get("", response_model=FriendListResponse)
async def get_friends(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get your accepted friends with their current status, ordered by username.
    """
    friends = await UserStatusService.friends_with_presence(session, current_user.id)
    return FriendListResponse(friends=friends)


@friendship_router.get("/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query(..., description="Search query (minimum 2 characters)"),
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Search for users by username or email. Returns at most 20 users.
    """
    users = await FriendshipService.search_users(
        session=session,
        search_query=q,
        current_user_id=current_user.id
    )
    return UserSearchResponse(users=users)


@friendship_router.post("/request", response_model=FriendRequestCreated, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request_data: FriendRequestCreate,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Send a friend request to another user.

    - **friend_id**: User ID of the user to send the friend request to

    Fails with 409 if the two users already have a request or friendship
    in either direction.
    """
    friendship = await FriendshipService.request_friendship(
        session=session,
        initiator_id=current_user.id,
        target_id=request_data.friend_id
    )
    return FriendRequestCreated(request_id=friendship.id)


@friendship_router.post("/accept", response_model=FriendshipResponse)
async def accept_friend_request(
    accept_data: FriendRequestAccept,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Accept a pending friend request.

    Only the recipient of the friend request can accept it.
    """
    return await FriendshipService.accept_friendship(
        session=session,
        request_id=accept_data.request_id,
        acting_user_id=current_user.id
    )


@friendship_router.delete("/remove", status_code=status.HTTP_204_NO_CONTENT)
async def remove_friendship(
    remove_data: FriendshipRemove,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Remove a friend, or cancel/reject a friend request.

    - **friend_id**: the other user, works in both directions
    - **request_id**: a specific request or friendship

    Either participant can remove it, whatever its status.
    """
    await FriendshipService.remove_friendship(
        session=session,
        acting_user_id=current_user.id,
        friend_id=remove_data.friend_id,
        request_id=remove_data.request_id
    )
    return None


@friendship_router.get("/requests", response_model=PendingRequestsResponse)
async def get_pending_requests(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get pending friend requests you received and sent, newest first.
    """
    return await FriendshipService.list_pending_requests(session, current_user.id)
