# app/models/friendship.py

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from infrastructure.postgres_connection import Base, utcnow


def canonical_pair_key(user_id_a: int, user_id_b: int) -> str:
    """Order-independent key for the pair {a, b}: lower id first."""
    low, high = sorted((user_id_a, user_id_b))
    return f"{low}:{high}"


class Friendship(Base):
    """
    Friendship edge between two registered users.

    user_id is the initiator of the request and friend_id its target.
    pair_key is unique, so a pair holds at most one row whichever side
    initiated it and whatever its status.
    """
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("pair_key", name="uq_friendships_pair_key"),
        CheckConstraint("user_id <> friend_id", name="ck_friendships_not_self"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("registered_users.id"), nullable=False, index=True)
    friend_id = Column(Integer, ForeignKey("registered_users.id"), nullable=False, index=True)
    pair_key = Column(String(64), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    accepted_at = Column(DateTime, nullable=True)

    initiator = relationship("RegisteredUser", foreign_keys=[user_id])
    target = relationship("RegisteredUser", foreign_keys=[friend_id])

    def counterpart_of(self, user_id: int) -> int:
        return self.friend_id if self.user_id == user_id else self.user_id

    def __repr__(self):
        return f"<Friendship(id={self.id}, user_id={self.user_id}, friend_id={self.friend_id}, status='{self.status}')>"
