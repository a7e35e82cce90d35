# app/models/status_update.py

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from infrastructure.postgres_connection import Base, utcnow


class StatusUpdate(Base):
    """Append-only presence event published by a user"""
    __tablename__ = "status_updates"
    __table_args__ = (
        # Latest event per user: first row of (user_id, created_at DESC, id DESC)
        Index("ix_status_updates_user_latest", "user_id", "created_at", "id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("registered_users.id"), nullable=False)
    status_type = Column(String(32), nullable=False)
    status_text = Column(String(128), nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<StatusUpdate(id={self.id}, user_id={self.user_id}, status_type='{self.status_type}')>"
