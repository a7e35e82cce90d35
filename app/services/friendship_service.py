# app/services/friendship_service.py

import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from config.settings import settings
from models.friendship import Friendship
from models.registered_user import RegisteredUser
from schemas.friendship_schema import PendingRequest, PendingRequestsResponse, UserSearchResult
from services.identity_provider import IdentityProvider
from services.relationship_store import RelationshipStore
from exceptions.domain_exceptions import BadRequestException

logger = logging.getLogger(__name__)


class FriendshipService:
    """Friend request lifecycle: request, accept, remove"""

    @staticmethod
    async def request_friendship(
        session: AsyncSession,
        initiator_id: int,
        target_id: int
    ) -> Friendship:
        """
        Send a friend request from initiator to target

        Args:
            session: Database session
            initiator_id: ID of user sending the request
            target_id: ID of user receiving the request

        Returns:
            Created friendship with status 'pending'

        Raises:
            SelfReferenceException: If users are the same
            UnknownTargetException: If target doesn't exist
            PermissionDeniedException: If the pair is blocked
            DuplicateEdgeException: If a friendship already exists in either direction
        """
        friendship = await RelationshipStore.create_edge(session, initiator_id, target_id)
        logger.info(f"User {initiator_id} sent friend request {friendship.id} to user {target_id}")
        return friendship

    @staticmethod
    async def accept_friendship(
        session: AsyncSession,
        request_id: int,
        acting_user_id: int
    ) -> Friendship:
        """
        Accept a pending friend request

        Args:
            session: Database session
            request_id: ID of the friendship created by the request
            acting_user_id: ID of user accepting; must be the request's target

        Returns:
            Updated friendship with status 'accepted' and accepted_at set

        Raises:
            EdgeNotFoundException: If the request doesn't exist
            NotAuthorizedException: If acting user is not the target
            AlreadyAcceptedException: If the request was accepted before
        """
        friendship = await RelationshipStore.transition_to_accepted(session, request_id, acting_user_id)
        logger.info(f"User {acting_user_id} accepted friend request {request_id} from user {friendship.user_id}")
        return friendship

    @staticmethod
    async def remove_friendship(
        session: AsyncSession,
        acting_user_id: int,
        friend_id: Optional[int] = None,
        request_id: Optional[int] = None
    ) -> None:
        """
        Remove a friendship, or cancel/reject a friend request

        Works on any status. Either participant may call it.

        Raises:
            BadRequestException: If neither friend_id nor request_id is given
            EdgeNotFoundException: If nothing matched for this user
        """
        if friend_id is None and request_id is None:
            raise BadRequestException(message="Friend ID or Request ID is required")

        if request_id is not None:
            await RelationshipStore.delete_edge(session, acting_user_id, edge_id=request_id)
            logger.info(f"User {acting_user_id} removed friendship {request_id}")
        else:
            await RelationshipStore.delete_edge(session, acting_user_id, other_id=friend_id)
            logger.info(f"User {acting_user_id} removed friendship with user {friend_id}")

    @staticmethod
    async def list_pending_requests(session: AsyncSession, user_id: int) -> PendingRequestsResponse:
        """
        Get pending friend requests, both received and sent, newest first
        """
        received, sent = await RelationshipStore.list_pending_edges(session, user_id)

        counterpart_ids = [f.counterpart_of(user_id) for f in received + sent]
        profiles = await IdentityProvider.public_profiles(session, counterpart_ids)

        def to_request(friendship: Friendship) -> Optional[PendingRequest]:
            other_id = friendship.counterpart_of(user_id)
            profile = profiles.get(other_id)
            if profile is None:
                return None
            return PendingRequest(
                request_id=friendship.id,
                user_id=other_id,
                username=profile["username"],
                avatar_url=profile["avatar_url"],
                created_at=friendship.created_at
            )

        received_requests = [to_request(f) for f in received]
        sent_requests = [to_request(f) for f in sent]

        return PendingRequestsResponse(
            received=[r for r in received_requests if r is not None],
            sent=[r for r in sent_requests if r is not None]
        )

    @staticmethod
    async def search_users(
        session: AsyncSession,
        search_query: str,
        current_user_id: int
    ) -> List[UserSearchResult]:
        """
        Search for users by email or username

        Args:
            session: Database session
            search_query: Substring to look for (case-insensitive)
            current_user_id: ID of the current user (to exclude from results)

        Returns:
            Up to SEARCH_RESULT_LIMIT users ordered by username

        Raises:
            BadRequestException: If search query is too short
        """
        query_text = search_query.strip()
        if len(query_text) < settings.SEARCH_MIN_QUERY_LENGTH:
            raise BadRequestException(
                message=f"Search query must be at least {settings.SEARCH_MIN_QUERY_LENGTH} characters",
                details={"query_length": len(query_text), "minimum_length": settings.SEARCH_MIN_QUERY_LENGTH}
            )

        search_pattern = f"%{query_text}%"
        query = select(RegisteredUser).where(
            and_(
                or_(
                    RegisteredUser.username.ilike(search_pattern),
                    RegisteredUser.email.ilike(search_pattern)
                ),
                RegisteredUser.id != current_user_id,
                RegisteredUser.is_active == True
            )
        ).order_by(RegisteredUser.username).limit(settings.SEARCH_RESULT_LIMIT)

        result = await session.execute(query)
        users = result.scalars().all()

        return [
            UserSearchResult(
                user_id=user.id,
                username=user.username,
                avatar_url=user.avatar_url
            )
            for user in users
        ]
