"""
Pytest configuration and fixtures for testing
"""
import os
import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from infrastructure.postgres_connection import Base, utcnow
from models.registered_user import RegisteredUser
from models.friendship import Friendship, canonical_pair_key
from models.status_update import StatusUpdate  # noqa: F401  registers the table


# Test database URL - using file-based SQLite to avoid in-memory connection issues
TEST_DATABASE_PATH = "./test.db"
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DATABASE_PATH}"


@pytest.fixture(scope="function")
async def db_engine():
    """Create a test database engine"""
    if os.path.exists(TEST_DATABASE_PATH):
        os.remove(TEST_DATABASE_PATH)

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()

    if os.path.exists(TEST_DATABASE_PATH):
        os.remove(TEST_DATABASE_PATH)


@pytest.fixture(scope="function")
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session"""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def _create_user(session: AsyncSession, username: str, is_active: bool = True) -> RegisteredUser:
    user = RegisteredUser(
        email=f"{username.lower()}@test.com",
        hashed_password=f"hashed_password_{username}",
        username=username,
        avatar_url=f"/avatars/{username.lower()}.png",
        is_active=is_active,
        is_superuser=False,
        is_verified=is_active,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def test_user_1(db_session: AsyncSession) -> RegisteredUser:
    return await _create_user(db_session, "alice")


@pytest.fixture
async def test_user_2(db_session: AsyncSession) -> RegisteredUser:
    return await _create_user(db_session, "Bob")


@pytest.fixture
async def test_user_3(db_session: AsyncSession) -> RegisteredUser:
    return await _create_user(db_session, "carol")


@pytest.fixture
async def inactive_user(db_session: AsyncSession) -> RegisteredUser:
    return await _create_user(db_session, "ghost", is_active=False)


async def _create_friendship(
    session: AsyncSession,
    initiator: RegisteredUser,
    target: RegisteredUser,
    status: str
) -> Friendship:
    now = utcnow()
    friendship = Friendship(
        user_id=initiator.id,
        friend_id=target.id,
        pair_key=canonical_pair_key(initiator.id, target.id),
        status=status,
        created_at=now,
        accepted_at=now if status == "accepted" else None,
    )
    session.add(friendship)
    await session.commit()
    await session.refresh(friendship)
    return friendship


@pytest.fixture
async def pending_friendship(
    db_session: AsyncSession,
    test_user_1: RegisteredUser,
    test_user_2: RegisteredUser
) -> Friendship:
    """Pending request sent by user 1 to user 2"""
    return await _create_friendship(db_session, test_user_1, test_user_2, "pending")


@pytest.fixture
async def accepted_friendship(
    db_session: AsyncSession,
    test_user_1: RegisteredUser,
    test_user_3: RegisteredUser
) -> Friendship:
    """Accepted friendship initiated by user 1 with user 3"""
    return await _create_friendship(db_session, test_user_1, test_user_3, "accepted")


@pytest.fixture
async def blocked_friendship(
    db_session: AsyncSession,
    test_user_2: RegisteredUser,
    test_user_3: RegisteredUser
) -> Friendship:
    """Blocked edge between user 2 and user 3, as moderation would leave it"""
    return await _create_friendship(db_session, test_user_2, test_user_3, "blocked")


@pytest.fixture
async def api_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the ASGI app, sharing the test database"""
    from main import app
    from infrastructure.postgres_connection import get_db_session

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Make subsequent API calls run as the given user"""
    from main import app
    from api.routes.auth import current_active_user

    def _act_as(user: RegisteredUser) -> None:
        app.dependency_overrides[current_active_user] = lambda: user

    return _act_as
