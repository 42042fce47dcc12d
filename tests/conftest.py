"""Pytest fixtures for NewBridge tests."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import newbridge.models  # noqa: F401
from newbridge.database.base import Base
from newbridge.models.city import City
from newbridge.models.resource import Resource
from newbridge.models.tracked_user import TrackedUser

# Use SQLite for lightweight in-process testing
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def async_test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def async_test_session(async_test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        async_test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_session(async_test_session: AsyncSession) -> AsyncSession:
    """Session with two cities, a few Ames resources and one tracked user."""
    ames = City(slug="ames", name="Ames", state="IA", center_lat=42.03, center_lng=-93.62)
    boone = City(slug="boone", name="Boone", state="IA")
    async_test_session.add_all([ames, boone])
    await async_test_session.flush()

    async_test_session.add_all(
        [
            Resource(
                city_id=ames.id,
                category="food",
                external_id="pantry-1",
                name="Food at First",
                address="300 Main St",
                walk_in=True,
            ),
            Resource(
                city_id=ames.id,
                category="food",
                external_id="pantry-2",
                name="Bethesda Pantry",
                address="1517 Northwestern Ave",
            ),
            Resource(
                city_id=ames.id,
                category="shelter",
                external_id="shelter-1",
                name="Emergency Residence Project",
                address="913 Duff Ave",
            ),
            Resource(
                city_id=boone.id,
                category="food",
                external_id="boone-1",
                name="Boone Food Pantry",
                address="800 Story St",
            ),
            TrackedUser(email="casey@example.org", name="Casey"),
        ]
    )
    await async_test_session.commit()
    return async_test_session
