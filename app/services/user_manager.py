# app/services/user_manager.py

import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi_users import BaseUserManager, IntegerIDMixin
from sqlalchemy import select
from models.registered_user import RegisteredUser
from infrastructure.user_database import get_user_db
from config.settings import settings
from schemas.user_schema import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UsernameAlreadyExists(Exception):
    """Exception raised when username is already taken"""
    pass


class EmailAlreadyExists(Exception):
    """Exception raised when email is already registered"""
    pass


class UserManager(IntegerIDMixin, BaseUserManager[RegisteredUser, int]):
    """User manager for registered users with custom hooks"""

    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def validate_email_unique(self, email: str, exclude_user_id: Optional[int] = None):
        """
        Raises:
            EmailAlreadyExists: If email is already registered.
        """
        query = select(RegisteredUser).where(RegisteredUser.email == email)
        if exclude_user_id is not None:
            query = query.where(RegisteredUser.id != exclude_user_id)

        result = await self.user_db.session.execute(query)
        if result.scalar_one_or_none() is not None:
            raise EmailAlreadyExists(f"Email '{email}' is already registered")

    async def validate_username_unique(self, username: str, exclude_user_id: Optional[int] = None):
        """
        Raises:
            UsernameAlreadyExists: If username is already taken
        """
        query = select(RegisteredUser).where(RegisteredUser.username == username)
        if exclude_user_id is not None:
            query = query.where(RegisteredUser.id != exclude_user_id)

        result = await self.user_db.session.execute(query)
        if result.scalar_one_or_none() is not None:
            raise UsernameAlreadyExists(f"Username '{username}' is already taken")

    async def on_after_register(self, user: RegisteredUser, request: Optional[Request] = None):
        logger.info(f"User {user.id} ({user.username}) has registered")

    async def on_after_login(
        self,
        user: RegisteredUser,
        request: Optional[Request] = None,
        response=None
    ):
        logger.info(f"User {user.id} ({user.username}) has logged in")

    async def create(self, user_create: UserCreate, safe: bool = False, request: Optional[Request] = None) -> RegisteredUser:
        """Check email and username uniqueness before creating the user"""
        await self.validate_email_unique(user_create.email)
        await self.validate_username_unique(user_create.username)
        return await super().create(user_create, safe=safe, request=request)

    async def update(
        self,
        user_update: UserUpdate,
        user: RegisteredUser,
        safe: bool = False,
        request: Optional[Request] = None,
    ) -> RegisteredUser:
        """Check username uniqueness when it changes"""
        if user_update.username is not None and user_update.username != user.username:
            await self.validate_username_unique(user_update.username, exclude_user_id=user.id)
        return await super().update(user_update, user, safe=safe, request=request)


async def get_user_manager(user_db=Depends(get_user_db)):
    """Dependency to get the user manager"""
    yield UserManager(user_db)
