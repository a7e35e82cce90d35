# app/services/identity_provider.py

from typing import Dict, Iterable, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser


class IdentityProvider:
    """
    Read-only view of registered accounts used by the friendship core.

    Authentication itself is handled by fastapi-users (see api/routes/auth.py);
    this class only confirms that ids exist and resolves display identities.
    """

    @staticmethod
    async def user_exists(session: AsyncSession, user_id: int) -> bool:
        query = select(RegisteredUser.id).where(
            RegisteredUser.id == user_id,
            RegisteredUser.is_active == True
        )
        result = await session.execute(query)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def public_profiles(session: AsyncSession, user_ids: Iterable[int]) -> Dict[int, dict]:
        """Map user id -> {"username", "avatar_url"} for the ids that exist"""
        ids = set(user_ids)
        if not ids:
            return {}

        query = select(RegisteredUser.id, RegisteredUser.username, RegisteredUser.avatar_url).where(
            RegisteredUser.id.in_(ids)
        )
        result = await session.execute(query)
        return {
            row.id: {"username": row.username, "avatar_url": row.avatar_url}
            for row in result
        }

    @classmethod
    async def display_names(cls, session: AsyncSession, user_ids: Iterable[int]) -> Dict[int, str]:
        profiles = await cls.public_profiles(session, user_ids)
        return {user_id: profile["username"] for user_id, profile in profiles.items()}

    @classmethod
    async def display_name(cls, session: AsyncSession, user_id: int) -> Optional[str]:
        names = await cls.display_names(session, [user_id])
        return names.get(user_id)
