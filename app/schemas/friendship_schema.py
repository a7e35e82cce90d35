# app/schemas/friendship_schema.py

from enum import Enum
from pydantic import BaseModel, ConfigDict, model_validator
from datetime import datetime
from typing import Optional


class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    BLOCKED = "blocked"  # set only by external moderation


class FriendRequestCreate(BaseModel):
    """Schema for sending a friend request"""
    friend_id: int


class FriendRequestCreated(BaseModel):
    """Schema returned after a friend request was created"""
    request_id: int


class FriendRequestAccept(BaseModel):
    """Schema for accepting a friend request"""
    request_id: int


class FriendshipRemove(BaseModel):
    """Schema for removing a friend or cancelling/rejecting a request"""
    friend_id: Optional[int] = None
    request_id: Optional[int] = None

    @model_validator(mode="after")
    def require_one_criterion(self) -> "FriendshipRemove":
        if self.friend_id is None and self.request_id is None:
            raise ValueError("Friend ID or Request ID is required")
        return self


class FriendshipResponse(BaseModel):
    """Schema for friendship response"""
    id: int
    user_id: int
    friend_id: int
    status: FriendshipStatus
    created_at: datetime
    accepted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PendingRequest(BaseModel):
    """A pending request as seen by one of its participants"""
    request_id: int
    user_id: int  # the other participant
    username: str
    avatar_url: Optional[str] = None
    created_at: datetime


class PendingRequestsResponse(BaseModel):
    received: list[PendingRequest]
    sent: list[PendingRequest]


class UserSearchResult(BaseModel):
    """Schema for user search results"""
    user_id: int
    username: str
    avatar_url: Optional[str] = None


class UserSearchResponse(BaseModel):
    users: list[UserSearchResult]
