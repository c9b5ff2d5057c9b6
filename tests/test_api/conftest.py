"""API test fixtures: AsyncClient with dependency overrides."""

import uuid
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from fedsearch.api.deps import get_db, get_search_service
from fedsearch.api.main import create_app
from fedsearch.search.orchestrator import FederatedSearchService
from fedsearch.search.types import FederatedSearchResult, SearchResult, SearchSource, SourceStat


@pytest.fixture
def search_result():
    return FederatedSearchResult(
        results=[
            SearchResult(
                id="article-1",
                source=SearchSource.ARTICLES,
                source_id=str(uuid.UUID(int=1)),
                title="Vacation Policy 2024",
                excerpt="How vacation days accrue",
                url="/diq/content/vacation-policy-2024",
                score=0.8,
            )
        ],
        total=1,
        sources=[SourceStat(source=SearchSource.ARTICLES, count=1, duration_ms=3.2)],
        query="vacation policy",
        took_ms=5.0,
        has_more=False,
    )


@pytest.fixture
def mock_search_service(search_result):
    service = AsyncMock(spec=FederatedSearchService)
    service.search = AsyncMock(return_value=search_result)
    return service


@pytest.fixture
def mock_api_db_session():
    session = AsyncMock()
    session.execute = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def app(mock_search_service, mock_api_db_session):
    """Create app with all dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_search_service] = lambda: mock_search_service
    application.dependency_overrides[get_db] = lambda: mock_api_db_session
    return application


@pytest.fixture
async def client(app):
    """Async test client that bypasses lifespan."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
