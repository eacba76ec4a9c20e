"""Shared test fixtures."""

import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from stablesync.database import Base
from stablesync.models import Horse, HorseStatus, Stablemate

from tests.fixtures.factories import create_horse, create_stablemate


@pytest.fixture
async def db_engine():
    """Create in-memory SQLite engine for tests."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        future=True,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session with transaction rollback."""
    async_session = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def file_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory on a temporary SQLite file.

    Each session gets its own connection, as in production, so the
    orchestrator's per-horse transactions are really independent.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def test_stablemate(db_session: AsyncSession) -> Stablemate:
    """Create a sample stablemate for testing."""
    stablemate = create_stablemate(name="Yıldız Eküri")
    db_session.add(stablemate)
    await db_session.flush()
    return stablemate


@pytest.fixture
async def test_horse(db_session: AsyncSession, test_stablemate: Stablemate) -> Horse:
    """Create a sample horse for testing."""
    horse = create_horse(stablemate_id=test_stablemate.id, name="KARAYEL", external_ref="100001")
    db_session.add(horse)
    await db_session.flush()
    return horse


@pytest.fixture
async def test_horses(db_session: AsyncSession, test_stablemate: Stablemate) -> list[Horse]:
    """Active, retired, dead and never-imported horses of one stablemate."""
    horses = [
        create_horse(test_stablemate.id, name="KARAYEL", external_ref="100001"),
        create_horse(test_stablemate.id, name="BORA", external_ref="100002", status=HorseStatus.RETIRED),
        create_horse(test_stablemate.id, name="POYRAZ", external_ref="100003", status=HorseStatus.DEAD),
        create_horse(test_stablemate.id, name="LODOS", external_ref=None),
    ]
    db_session.add_all(horses)
    await db_session.flush()
    return horses
