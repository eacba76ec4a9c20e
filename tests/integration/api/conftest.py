"""Shared fixtures for API integration tests."""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stablesync.api.sync import get_orchestrator
from stablesync.config import Settings
from stablesync.database import get_db
from stablesync.main import app
from stablesync.models import Horse, HorseStatus, Stablemate
from stablesync.services import LoggingNotifier, SyncOrchestrator

from tests.fixtures.factories import create_horse, create_stablemate
from tests.fixtures.fake_fetcher import FakeFetcher


@pytest.fixture
def fetcher() -> FakeFetcher:
    """Fake source serving the pages of KARAYEL and BORA."""
    fake = FakeFetcher()
    fake.add_horse("100001")
    fake.add_horse("100002")
    return fake


@pytest.fixture(scope="function")
async def client(
    file_session_factory: async_sessionmaker[AsyncSession],
    fetcher: FakeFetcher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API tests."""
    async def get_test_db():
        async with file_session_factory() as session:
            yield session
            await session.commit()

    def get_test_orchestrator():
        return SyncOrchestrator(
            file_session_factory,
            fetcher_factory=lambda: fetcher,
            notifier=LoggingNotifier(),
            settings=Settings(scraping_delay=0),
        )

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_orchestrator] = get_test_orchestrator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_orchestrator, None)


@pytest.fixture
async def test_stablemate(file_session_factory) -> Stablemate:
    """Create a sample stablemate for testing."""
    async with file_session_factory() as session:
        async with session.begin():
            stablemate = create_stablemate(name="Yıldız Eküri")
            session.add(stablemate)
        return stablemate


@pytest.fixture
async def test_horses(file_session_factory, test_stablemate: Stablemate) -> list[Horse]:
    """KARAYEL (active), BORA (retired) and LODOS (never imported)."""
    async with file_session_factory() as session:
        async with session.begin():
            horses = [
                create_horse(test_stablemate.id, name="KARAYEL", external_ref="100001"),
                create_horse(
                    test_stablemate.id, name="BORA", external_ref="100002", status=HorseStatus.RETIRED
                ),
                create_horse(test_stablemate.id, name="LODOS", external_ref=None),
            ]
            session.add_all(horses)
        return horses
