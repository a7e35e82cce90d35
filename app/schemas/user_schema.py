# app/schemas/user_schema.py

from fastapi_users import schemas
from typing import Optional
from pydantic import EmailStr, Field, ConfigDict, field_validator
from schemas.user_status_schema import StatusType
import re


USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9._-]{3,100}$')


class UserValidatorsMixin:
    """Mixin class with shared validators for user schemas"""

    @field_validator('username', check_fields=False)
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        """3-100 characters: letters, digits, dots, underscores, hyphens"""
        if v is not None:
            v = v.strip()
            if not USERNAME_PATTERN.match(v):
                raise ValueError('Username must be 3-100 characters of letters, digits, ".", "_" or "-"')
        return v

    @field_validator('password', check_fields=False)
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) < 8:
            raise ValueError('Password must be at least 8 characters long')
        return v


class UserRead(schemas.BaseUser[int]):
    """Schema for reading user data"""
    username: str
    email: str
    avatar_url: Optional[str] = None


class UserMe(UserRead):
    """Own profile together with the current status"""
    status_type: StatusType
    status_text: str


class UserCreate(UserValidatorsMixin, schemas.BaseUserCreate):
    """Schema for creating a new user - requires email, password, and username"""
    email: EmailStr
    password: str
    username: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "strongpassword123",
                "username": "cool_user"
            }
        }
    )


class UserUpdate(UserValidatorsMixin, schemas.BaseUserUpdate):
    """Schema for updating user data - username, avatar and password only"""
    email: None = None

    username: Optional[str] = None
    password: Optional[str] = None
    avatar_url: Optional[str] = Field(None, max_length=500)
