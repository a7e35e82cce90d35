# app/services/relationship_store.py

import logging
from typing import List, Optional, Set, Tuple
from sqlalchemy import select, update, delete, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.postgres_connection import utcnow
from models.friendship import Friendship, canonical_pair_key
from schemas.friendship_schema import FriendshipStatus
from services.identity_provider import IdentityProvider
from exceptions.domain_exceptions import (
    SelfReferenceException,
    UnknownTargetException,
    DuplicateEdgeException,
    PermissionDeniedException,
    EdgeNotFoundException,
    NotAuthorizedException,
    AlreadyAcceptedException,
)

logger = logging.getLogger(__name__)


class RelationshipStore:
    """
    Durable storage of friendship edges.

    Every method is a single transaction on the given session. Pair uniqueness
    is enforced by the pair_key constraint, so two concurrent creates for the
    same pair cannot both commit.
    """

    @staticmethod
    def _participant_clause(user_id: int):
        return or_(Friendship.user_id == user_id, Friendship.friend_id == user_id)

    @staticmethod
    async def _get_by_pair(session: AsyncSession, user_id: int, other_id: int) -> Optional[Friendship]:
        query = select(Friendship).where(
            Friendship.pair_key == canonical_pair_key(user_id, other_id)
        ).execution_options(populate_existing=True)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def _existing_edge_error(existing: Friendship) -> Exception:
        if existing.status == FriendshipStatus.BLOCKED.value:
            return PermissionDeniedException(friendship_id=existing.id)
        return DuplicateEdgeException(existing.status, friendship_id=existing.id)

    @classmethod
    async def create_edge(cls, session: AsyncSession, initiator_id: int, target_id: int) -> Friendship:
        """
        Create a pending edge from initiator to target

        Raises:
            SelfReferenceException: initiator and target are the same user
            UnknownTargetException: target is not an active account
            PermissionDeniedException: the pair is blocked
            DuplicateEdgeException: any other edge already exists for the pair
        """
        if initiator_id == target_id:
            raise SelfReferenceException(initiator_id)

        if not await IdentityProvider.user_exists(session, target_id):
            raise UnknownTargetException(target_id)

        existing = await cls._get_by_pair(session, initiator_id, target_id)
        if existing is not None:
            raise cls._existing_edge_error(existing)

        pair_key = canonical_pair_key(initiator_id, target_id)
        edge = Friendship(
            user_id=initiator_id,
            friend_id=target_id,
            pair_key=pair_key,
            status=FriendshipStatus.PENDING.value,
            created_at=utcnow(),
        )
        session.add(edge)
        try:
            await session.commit()
        except IntegrityError:
            # Lost a race against a concurrent create for the same pair
            await session.rollback()
            existing = await cls._get_by_pair(session, initiator_id, target_id)
            if existing is None:
                raise
            logger.warning(f"Concurrent friendship create for pair {pair_key} rejected")
            raise cls._existing_edge_error(existing)

        await session.refresh(edge)
        return edge

    @classmethod
    async def get_edge(
        cls,
        session: AsyncSession,
        edge_id: Optional[int] = None,
        user_id: Optional[int] = None,
        other_id: Optional[int] = None
    ) -> Optional[Friendship]:
        """Look an edge up by id, or by the unordered pair (user_id, other_id)"""
        if edge_id is not None:
            query = select(Friendship).where(
                Friendship.id == edge_id
            ).execution_options(populate_existing=True)
            result = await session.execute(query)
            return result.scalar_one_or_none()

        if user_id is not None and other_id is not None:
            return await cls._get_by_pair(session, user_id, other_id)

        raise ValueError("get_edge needs edge_id or both user_id and other_id")

    @classmethod
    async def transition_to_accepted(cls, session: AsyncSession, edge_id: int, acting_user_id: int) -> Friendship:
        """
        Move a pending edge to accepted. Only the stored target may do this.

        Raises:
            EdgeNotFoundException: no edge with this id
            NotAuthorizedException: acting user is not the target, or the edge is blocked
            AlreadyAcceptedException: the edge is already accepted
        """
        edge = await cls.get_edge(session, edge_id=edge_id)
        if edge is None:
            raise EdgeNotFoundException("Friend request not found", {"request_id": edge_id})
        if edge.friend_id != acting_user_id:
            raise NotAuthorizedException(edge.id, acting_user_id)
        if edge.status == FriendshipStatus.ACCEPTED.value:
            raise AlreadyAcceptedException(edge.id)
        if edge.status != FriendshipStatus.PENDING.value:
            raise NotAuthorizedException(edge.id, acting_user_id)

        stmt = update(Friendship).where(
            Friendship.id == edge_id,
            Friendship.friend_id == acting_user_id,
            Friendship.status == FriendshipStatus.PENDING.value
        ).values(
            status=FriendshipStatus.ACCEPTED.value,
            accepted_at=utcnow()
        )
        result = await session.execute(stmt)
        updated = result.rowcount
        await session.commit()

        if updated == 0:
            # The row changed between the read and the update
            current = await cls.get_edge(session, edge_id=edge_id)
            if current is not None and current.status == FriendshipStatus.ACCEPTED.value:
                raise AlreadyAcceptedException(edge_id)
            raise EdgeNotFoundException("Friend request not found", {"request_id": edge_id})

        await session.refresh(edge)
        return edge

    @classmethod
    async def delete_edge(
        cls,
        session: AsyncSession,
        acting_user_id: int,
        edge_id: Optional[int] = None,
        other_id: Optional[int] = None
    ) -> None:
        """
        Hard delete the edge matching the criteria, whatever its status,
        provided the acting user is one of its participants.

        Raises:
            EdgeNotFoundException: zero rows matched
        """
        if edge_id is not None:
            criteria = and_(Friendship.id == edge_id, cls._participant_clause(acting_user_id))
            details = {"request_id": edge_id}
        elif other_id is not None:
            criteria = Friendship.pair_key == canonical_pair_key(acting_user_id, other_id)
            details = {"user_id": acting_user_id, "friend_id": other_id}
        else:
            raise ValueError("delete_edge needs edge_id or other_id")

        result = await session.execute(
            delete(Friendship).where(criteria).execution_options(synchronize_session="fetch")
        )
        deleted = result.rowcount
        await session.commit()

        if deleted == 0:
            raise EdgeNotFoundException(details=details)

    @classmethod
    async def list_accepted_counterparts(cls, session: AsyncSession, user_id: int) -> Set[int]:
        """Ids of users holding an accepted edge with user_id"""
        query = select(Friendship.user_id, Friendship.friend_id).where(
            cls._participant_clause(user_id),
            Friendship.status == FriendshipStatus.ACCEPTED.value
        )
        result = await session.execute(query)
        return {
            row.friend_id if row.user_id == user_id else row.user_id
            for row in result
        }

    @staticmethod
    async def list_pending_edges(session: AsyncSession, user_id: int) -> Tuple[List[Friendship], List[Friendship]]:
        """Pending edges as (received, sent), newest first"""
        order = (Friendship.created_at.desc(), Friendship.id.desc())

        received_query = select(Friendship).where(
            Friendship.friend_id == user_id,
            Friendship.status == FriendshipStatus.PENDING.value
        ).order_by(*order)
        sent_query = select(Friendship).where(
            Friendship.user_id == user_id,
            Friendship.status == FriendshipStatus.PENDING.value
        ).order_by(*order)

        received = (await session.execute(received_query)).scalars().all()
        sent = (await session.execute(sent_query)).scalars().all()
        return list(received), list(sent)
