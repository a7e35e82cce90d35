# app/schemas/user_status_schema.py

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class StatusType(str, Enum):
    ONLINE = "online"
    AWAY = "away"
    BUSY = "busy"
    BRB = "brb"
    PHONE = "phone"
    LUNCH = "lunch"
    OFFLINE = "offline"
    APPEAR_OFFLINE = "appear_offline"


class PresenceBucket(str, Enum):
    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"


STATUS_TEXT_MAX_LENGTH = 128


class StatusUpdateRequest(BaseModel):
    """
    Body of a status update.

    status_type is a plain string so an unknown value reaches the service
    and is reported as InvalidStatusTypeException.
    """
    status_type: str
    status_text: Optional[str] = ""


class StatusUpdateResponse(BaseModel):
    id: int
    status_type: StatusType
    status_text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PresenceSnapshot(BaseModel):
    """Current presence of a user; last_updated is None when no event exists"""
    user_id: int
    status_type: StatusType = StatusType.OFFLINE
    status_text: str = ""
    last_updated: Optional[datetime] = None


class FriendWithPresence(BaseModel):
    user_id: int
    username: str
    avatar_url: Optional[str] = None
    status_type: StatusType
    status_text: str
    last_updated: Optional[datetime] = None
    bucket: PresenceBucket


class FriendListResponse(BaseModel):
    friends: List[FriendWithPresence]


class FriendPresenceGroups(BaseModel):
    online: List[FriendWithPresence] = []
    away: List[FriendWithPresence] = []
    offline: List[FriendWithPresence] = []
