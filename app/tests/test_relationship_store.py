"""
Unit tests for RelationshipStore

Tests cover:
- Canonical pair keys
- Edge creation and pair uniqueness in both directions
- Losing a concurrent create race
- Accept transition and its authorization
- Deletion by either participant and affected-row detection
- Accepted counterpart listing
"""
import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from models.friendship import Friendship, canonical_pair_key
from services.relationship_store import RelationshipStore
from exceptions.domain_exceptions import (
    SelfReferenceException,
    UnknownTargetException,
    DuplicateEdgeException,
    PermissionDeniedException,
    EdgeNotFoundException,
    NotAuthorizedException,
    AlreadyAcceptedException,
)


async def count_pair_rows(session: AsyncSession, user_id: int, other_id: int) -> int:
    query = select(func.count()).select_from(Friendship).where(
        Friendship.pair_key == canonical_pair_key(user_id, other_id)
    )
    return (await session.execute(query)).scalar()


@pytest.mark.unit
class TestCanonicalPairKey:

    def test_order_independent(self):
        assert canonical_pair_key(3, 17) == canonical_pair_key(17, 3)

    def test_lower_id_first(self):
        assert canonical_pair_key(17, 3) == "3:17"

    def test_numeric_not_lexical_order(self):
        assert canonical_pair_key(10, 9) == "9:10"


@pytest.mark.unit
class TestCreateEdge:

    async def test_create_edge_success(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser
    ):
        edge = await RelationshipStore.create_edge(db_session, test_user_1.id, test_user_2.id)

        assert edge.id is not None
        assert edge.user_id == test_user_1.id
        assert edge.friend_id == test_user_2.id
        assert edge.status == "pending"
        assert edge.pair_key == canonical_pair_key(test_user_1.id, test_user_2.id)
        assert edge.created_at is not None
        assert edge.accepted_at is None

    async def test_self_reference_checked_first(
        self,
        db_session: AsyncSession,
        inactive_user: RegisteredUser
    ):
        """Self-reference wins even when the id would also be unknown"""
        with pytest.raises(SelfReferenceException):
            await RelationshipStore.create_edge(db_session, inactive_user.id, inactive_user.id)

    async def test_unknown_target(self, db_session: AsyncSession, test_user_1: RegisteredUser):
        with pytest.raises(UnknownTargetException) as exc_info:
            await RelationshipStore.create_edge(db_session, test_user_1.id, 99999)

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["user_id"] == 99999

    async def test_inactive_target_is_unknown(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        inactive_user: RegisteredUser
    ):
        with pytest.raises(UnknownTargetException):
            await RelationshipStore.create_edge(db_session, test_user_1.id, inactive_user.id)

    @pytest.mark.parametrize("reverse", [False, True])
    async def test_duplicate_pending(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship,
        reverse: bool
    ):
        initiator, target = (test_user_2, test_user_1) if reverse else (test_user_1, test_user_2)

        with pytest.raises(DuplicateEdgeException) as exc_info:
            await RelationshipStore.create_edge(db_session, initiator.id, target.id)

        assert exc_info.value.existing_status == "pending"
        assert exc_info.value.details["friendship_id"] == pending_friendship.id
        assert await count_pair_rows(db_session, test_user_1.id, test_user_2.id) == 1

    async def test_duplicate_accepted(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_3: RegisteredUser,
        accepted_friendship: Friendship
    ):
        with pytest.raises(DuplicateEdgeException) as exc_info:
            await RelationshipStore.create_edge(db_session, test_user_3.id, test_user_1.id)

        assert exc_info.value.existing_status == "accepted"
        assert exc_info.value.message == "Already friends"

    @pytest.mark.parametrize("reverse", [False, True])
    async def test_blocked_pair_is_permission_denied(
        self,
        db_session: AsyncSession,
        test_user_2: RegisteredUser,
        test_user_3: RegisteredUser,
        blocked_friendship: Friendship,
        reverse: bool
    ):
        initiator, target = (test_user_3, test_user_2) if reverse else (test_user_2, test_user_3)

        with pytest.raises(PermissionDeniedException) as exc_info:
            await RelationshipStore.create_edge(db_session, initiator.id, target.id)

        assert exc_info.value.status_code == 403

    async def test_lost_race_reported_as_duplicate(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship,
        monkeypatch
    ):
        """The pre-check misses the winner's row; the unique constraint catches it"""
        user_1_id, user_2_id = test_user_1.id, test_user_2.id
        winner_id = pending_friendship.id

        real_lookup = RelationshipStore._get_by_pair
        calls = []

        async def racing_lookup(session, user_id, other_id):
            calls.append((user_id, other_id))
            if len(calls) == 1:
                return None
            return await real_lookup(session, user_id, other_id)

        monkeypatch.setattr(RelationshipStore, "_get_by_pair", staticmethod(racing_lookup))

        with pytest.raises(DuplicateEdgeException) as exc_info:
            await RelationshipStore.create_edge(db_session, user_2_id, user_1_id)

        assert exc_info.value.existing_status == "pending"
        assert exc_info.value.details["friendship_id"] == winner_id
        assert len(calls) == 2

        monkeypatch.undo()
        assert await count_pair_rows(db_session, user_1_id, user_2_id) == 1

    async def test_store_rejects_second_row_for_pair(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship
    ):
        """The constraint holds even for writes that bypass the service"""
        db_session.add(Friendship(
            user_id=test_user_2.id,
            friend_id=test_user_1.id,
            pair_key=canonical_pair_key(test_user_2.id, test_user_1.id),
            status="pending"
        ))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()


@pytest.mark.unit
class TestGetEdge:

    async def test_by_id(self, db_session: AsyncSession, pending_friendship: Friendship):
        edge = await RelationshipStore.get_edge(db_session, edge_id=pending_friendship.id)
        assert edge.id == pending_friendship.id

    async def test_by_pair_either_order(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship
    ):
        forward = await RelationshipStore.get_edge(db_session, user_id=test_user_1.id, other_id=test_user_2.id)
        backward = await RelationshipStore.get_edge(db_session, user_id=test_user_2.id, other_id=test_user_1.id)

        assert forward.id == backward.id == pending_friendship.id

    async def test_missing(self, db_session: AsyncSession):
        assert await RelationshipStore.get_edge(db_session, edge_id=424242) is None

    async def test_requires_criteria(self, db_session: AsyncSession):
        with pytest.raises(ValueError):
            await RelationshipStore.get_edge(db_session, user_id=1)


@pytest.mark.unit
class TestTransitionToAccepted:

    async def test_target_accepts(
        self,
        db_session: AsyncSession,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship
    ):
        edge = await RelationshipStore.transition_to_accepted(db_session, pending_friendship.id, test_user_2.id)

        assert edge.status == "accepted"
        assert edge.accepted_at is not None
        assert edge.accepted_at >= edge.created_at

    async def test_initiator_cannot_accept(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        pending_friendship: Friendship
    ):
        with pytest.raises(NotAuthorizedException):
            await RelationshipStore.transition_to_accepted(db_session, pending_friendship.id, test_user_1.id)

        edge = await RelationshipStore.get_edge(db_session, edge_id=pending_friendship.id)
        assert edge.status == "pending"
        assert edge.accepted_at is None

    async def test_outsider_cannot_accept(
        self,
        db_session: AsyncSession,
        test_user_3: RegisteredUser,
        pending_friendship: Friendship
    ):
        with pytest.raises(NotAuthorizedException):
            await RelationshipStore.transition_to_accepted(db_session, pending_friendship.id, test_user_3.id)

    async def test_missing_edge(self, db_session: AsyncSession, test_user_1: RegisteredUser):
        with pytest.raises(EdgeNotFoundException):
            await RelationshipStore.transition_to_accepted(db_session, 424242, test_user_1.id)

    async def test_accept_twice(
        self,
        db_session: AsyncSession,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship
    ):
        first = await RelationshipStore.transition_to_accepted(db_session, pending_friendship.id, test_user_2.id)
        first_accepted_at = first.accepted_at

        with pytest.raises(AlreadyAcceptedException) as exc_info:
            await RelationshipStore.transition_to_accepted(db_session, pending_friendship.id, test_user_2.id)

        assert exc_info.value.status_code == 409
        edge = await RelationshipStore.get_edge(db_session, edge_id=pending_friendship.id)
        assert edge.accepted_at == first_accepted_at

    async def test_blocked_edge_cannot_be_accepted(
        self,
        db_session: AsyncSession,
        test_user_3: RegisteredUser,
        blocked_friendship: Friendship
    ):
        with pytest.raises(NotAuthorizedException):
            await RelationshipStore.transition_to_accepted(db_session, blocked_friendship.id, test_user_3.id)


@pytest.mark.unit
class TestDeleteEdge:

    @pytest.mark.parametrize("by_target", [False, True])
    async def test_delete_by_pair_either_participant(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship,
        by_target: bool
    ):
        user_1_id, user_2_id = test_user_1.id, test_user_2.id
        actor, other = (user_2_id, user_1_id) if by_target else (user_1_id, user_2_id)

        await RelationshipStore.delete_edge(db_session, actor, other_id=other)

        assert await count_pair_rows(db_session, user_1_id, user_2_id) == 0

    async def test_delete_accepted_by_id(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_3: RegisteredUser,
        accepted_friendship: Friendship
    ):
        user_1_id, user_3_id = test_user_1.id, test_user_3.id
        edge_id = accepted_friendship.id

        await RelationshipStore.delete_edge(db_session, user_3_id, edge_id=edge_id)

        assert await count_pair_rows(db_session, user_1_id, user_3_id) == 0

    async def test_delete_blocked_by_participant(
        self,
        db_session: AsyncSession,
        test_user_2: RegisteredUser,
        test_user_3: RegisteredUser,
        blocked_friendship: Friendship
    ):
        user_2_id, user_3_id = test_user_2.id, test_user_3.id

        await RelationshipStore.delete_edge(db_session, user_2_id, other_id=user_3_id)

        assert await count_pair_rows(db_session, user_2_id, user_3_id) == 0

    async def test_non_participant_matches_nothing(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        test_user_3: RegisteredUser,
        pending_friendship: Friendship
    ):
        user_1_id, user_2_id, user_3_id = test_user_1.id, test_user_2.id, test_user_3.id
        edge_id = pending_friendship.id

        with pytest.raises(EdgeNotFoundException):
            await RelationshipStore.delete_edge(db_session, user_3_id, edge_id=edge_id)

        assert await count_pair_rows(db_session, user_1_id, user_2_id) == 1

    async def test_second_delete_not_found(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship
    ):
        user_1_id, user_2_id = test_user_1.id, test_user_2.id

        await RelationshipStore.delete_edge(db_session, user_1_id, other_id=user_2_id)
        with pytest.raises(EdgeNotFoundException):
            await RelationshipStore.delete_edge(db_session, user_1_id, other_id=user_2_id)

    async def test_requires_criteria(self, db_session: AsyncSession, test_user_1: RegisteredUser):
        with pytest.raises(ValueError):
            await RelationshipStore.delete_edge(db_session, test_user_1.id)


@pytest.mark.unit
class TestListAcceptedCounterparts:

    async def test_empty(self, db_session: AsyncSession, test_user_1: RegisteredUser):
        assert await RelationshipStore.list_accepted_counterparts(db_session, test_user_1.id) == set()

    async def test_accepted_only_both_directions(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        test_user_3: RegisteredUser,
        pending_friendship: Friendship,
        accepted_friendship: Friendship,
        blocked_friendship: Friendship
    ):
        assert await RelationshipStore.list_accepted_counterparts(db_session, test_user_1.id) == {test_user_3.id}
        assert await RelationshipStore.list_accepted_counterparts(db_session, test_user_3.id) == {test_user_1.id}
        assert await RelationshipStore.list_accepted_counterparts(db_session, test_user_2.id) == set()


@pytest.mark.unit
class TestListPendingEdges:

    async def test_received_and_sent(
        self,
        db_session: AsyncSession,
        test_user_1: RegisteredUser,
        test_user_2: RegisteredUser,
        pending_friendship: Friendship,
        accepted_friendship: Friendship
    ):
        received, sent = await RelationshipStore.list_pending_edges(db_session, test_user_1.id)
        assert received == []
        assert [f.id for f in sent] == [pending_friendship.id]

        received, sent = await RelationshipStore.list_pending_edges(db_session, test_user_2.id)
        assert [f.id for f in received] == [pending_friendship.id]
        assert sent == []
