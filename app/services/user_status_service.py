# app/services/user_status_service.py

import logging
from typing import Dict, Iterable, List, Optional, Union
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.postgres_connection import utcnow
from models.status_update import StatusUpdate
from schemas.user_status_schema import (
    StatusType,
    PresenceBucket,
    PresenceSnapshot,
    FriendWithPresence,
    FriendPresenceGroups,
    STATUS_TEXT_MAX_LENGTH,
)
from services.identity_provider import IdentityProvider
from services.relationship_store import RelationshipStore
from exceptions.domain_exceptions import (
    ForbiddenException,
    InvalidStatusTypeException,
    StatusTextTooLongException,
)

logger = logging.getLogger(__name__)


STATUS_BUCKETS: Dict[StatusType, PresenceBucket] = {
    StatusType.ONLINE: PresenceBucket.ONLINE,
    StatusType.AWAY: PresenceBucket.AWAY,
    StatusType.BUSY: PresenceBucket.AWAY,
    StatusType.BRB: PresenceBucket.AWAY,
    StatusType.PHONE: PresenceBucket.AWAY,
    StatusType.LUNCH: PresenceBucket.AWAY,
    StatusType.OFFLINE: PresenceBucket.OFFLINE,
    StatusType.APPEAR_OFFLINE: PresenceBucket.OFFLINE,
}


def _latest_first():
    # Timestamps can collide under concurrent writers; the higher id wins
    return (StatusUpdate.created_at.desc(), StatusUpdate.id.desc())


def display_order_key(friend: FriendWithPresence):
    """Friend list collation: case-folded username, then raw username, then id"""
    return (friend.username.casefold(), friend.username, friend.user_id)


class UserStatusService:
    """Append-only presence log and the friend presence views built on it"""

    @staticmethod
    def bucket_for(status_type: Union[StatusType, str]) -> PresenceBucket:
        return STATUS_BUCKETS[StatusType(status_type)]

    @staticmethod
    async def append_status_event(
        session: AsyncSession,
        user_id: int,
        status_type: Union[StatusType, str],
        status_text: Optional[str] = ""
    ) -> StatusUpdate:
        """
        Publish a new status for a user. Prior events are never touched.

        Raises:
            InvalidStatusTypeException: If status_type is not a known status
            StatusTextTooLongException: If status_text exceeds 128 characters
        """
        allowed = [s.value for s in StatusType]
        value = status_type.value if isinstance(status_type, StatusType) else status_type
        if value not in allowed:
            raise InvalidStatusTypeException(value, allowed)

        text = status_text or ""
        if len(text) > STATUS_TEXT_MAX_LENGTH:
            raise StatusTextTooLongException(len(text), STATUS_TEXT_MAX_LENGTH)

        event = StatusUpdate(
            user_id=user_id,
            status_type=value,
            status_text=text,
            created_at=utcnow()
        )
        session.add(event)
        await session.commit()
        await session.refresh(event)

        logger.info(f"User {user_id} set status {value} (event {event.id})")
        return event

    @staticmethod
    async def current_status(session: AsyncSession, user_id: int) -> PresenceSnapshot:
        """
        Latest status event of a user, or offline with empty text when the
        user never published one.
        """
        query = select(StatusUpdate).where(
            StatusUpdate.user_id == user_id
        ).order_by(*_latest_first()).limit(1)
        result = await session.execute(query)
        event = result.scalar_one_or_none()

        if event is None:
            return PresenceSnapshot(user_id=user_id)

        return PresenceSnapshot(
            user_id=user_id,
            status_type=StatusType(event.status_type),
            status_text=event.status_text,
            last_updated=event.created_at
        )

    @staticmethod
    async def current_statuses(session: AsyncSession, user_ids: Iterable[int]) -> Dict[int, PresenceSnapshot]:
        """
        Latest status of several users in one query: rank each user's events
        with the same ordering as current_status and keep rank 1.
        """
        ids = set(user_ids)
        if not ids:
            return {}

        rank = func.row_number().over(
            partition_by=StatusUpdate.user_id,
            order_by=_latest_first()
        ).label("rank")
        ranked = select(
            StatusUpdate.user_id,
            StatusUpdate.status_type,
            StatusUpdate.status_text,
            StatusUpdate.created_at,
            rank
        ).where(StatusUpdate.user_id.in_(ids)).subquery()

        result = await session.execute(select(ranked).where(ranked.c.rank == 1))

        snapshots = {user_id: PresenceSnapshot(user_id=user_id) for user_id in ids}
        for row in result:
            snapshots[row.user_id] = PresenceSnapshot(
                user_id=row.user_id,
                status_type=StatusType(row.status_type),
                status_text=row.status_text,
                last_updated=row.created_at
            )
        return snapshots

    @classmethod
    async def friends_with_presence(cls, session: AsyncSession, user_id: int) -> List[FriendWithPresence]:
        """
        Accepted friends of a user with their current presence, sorted by
        display name (see display_order_key).
        """
        friend_ids = await RelationshipStore.list_accepted_counterparts(session, user_id)
        if not friend_ids:
            return []

        profiles = await IdentityProvider.public_profiles(session, friend_ids)
        statuses = await cls.current_statuses(session, profiles.keys())

        friends = []
        for friend_id, profile in profiles.items():
            snapshot = statuses[friend_id]
            friends.append(FriendWithPresence(
                user_id=friend_id,
                username=profile["username"],
                avatar_url=profile["avatar_url"],
                status_type=snapshot.status_type,
                status_text=snapshot.status_text,
                last_updated=snapshot.last_updated,
                bucket=cls.bucket_for(snapshot.status_type)
            ))

        friends.sort(key=display_order_key)
        return friends

    @staticmethod
    def group_by_bucket(friends: List[FriendWithPresence]) -> FriendPresenceGroups:
        """Split a friend list into online/away/offline, keeping its order"""
        groups = FriendPresenceGroups()
        for friend in friends:
            getattr(groups, friend.bucket.value).append(friend)
        return groups

    @classmethod
    async def get_friend_status(cls, session: AsyncSession, user_id: int, friend_id: int) -> PresenceSnapshot:
        """
        Current status of one friend.

        Raises:
            ForbiddenException: If friend_id is not an accepted friend of user_id
        """
        friend_ids = await RelationshipStore.list_accepted_counterparts(session, user_id)
        if friend_id not in friend_ids:
            raise ForbiddenException(
                message="You can only query the status of your friends",
                details={"user_id": friend_id}
            )
        return await cls.current_status(session, friend_id)
