"""Shared test fixtures for the federated search test suite."""

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from fedsearch.common.config import Settings
from fedsearch.common.models import (
    Article,
    Connector,
    ConnectorItem,
    Department,
    Employee,
    KbCategory,
    KnowledgeItem,
    NewsPost,
    User,
)
from fedsearch.search.types import FederatedSearchParams, SearchResult, SearchSource

CREATED_AT = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def test_settings():
    """Settings with production defaults, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def mock_db_session():
    """Mock async SQLAlchemy session."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_session_factory(mock_db_session):
    """Callable returning an async context manager that yields ``mock_db_session``."""
    context = AsyncMock()
    context.__aenter__.return_value = mock_db_session
    context.__aexit__.return_value = None
    return Mock(return_value=context)


@pytest.fixture
def make_params():
    def _make(query: str = "vacation policy", **overrides) -> FederatedSearchParams:
        return FederatedSearchParams(query=query, **overrides)

    return _make


@pytest.fixture
def make_result():
    def _make(source: SearchSource = SearchSource.ARTICLES, source_id: str | None = None, score: float = 0.5, **kw):
        sid = source_id or uuid.uuid4().hex
        return SearchResult(
            id=f"{source.value}-{sid}",
            source=source,
            source_id=sid,
            title=kw.pop("title", f"Result {sid}"),
            score=score,
            **kw,
        )

    return _make


@pytest.fixture
def make_user():
    def _make(full_name: str = "Jane Doe", **kw) -> User:
        return User(
            id=kw.pop("id", uuid.uuid4()),
            email=kw.pop("email", "jane.doe@example.com"),
            full_name=full_name,
            avatar_url=kw.pop("avatar_url", "https://cdn.example.com/jane.png"),
            **kw,
        )

    return _make


@pytest.fixture
def make_article():
    def _make(title: str = "Vacation Policy 2024", embedding: list[float] | None = None, **kw) -> Article:
        return Article(
            id=kw.pop("id", uuid.uuid4()),
            title=title,
            slug=kw.pop("slug", "vacation-policy-2024"),
            excerpt=kw.pop("excerpt", "How many days off you get"),
            content=kw.pop("content", "<p>Employees accrue 25 days of vacation per year.</p>"),
            status=kw.pop("status", "published"),
            embedding=embedding,
            created_at=kw.pop("created_at", CREATED_AT),
            updated_at=kw.pop("updated_at", CREATED_AT),
            category=kw.pop("category", KbCategory(id=uuid.uuid4(), name="HR")),
            **kw,
        )

    return _make


@pytest.fixture
def make_knowledge_item():
    def _make(title: str = "Vacation FAQ", embedding: list[float] | None = None, **kw) -> KnowledgeItem:
        return KnowledgeItem(
            id=kw.pop("id", uuid.uuid4()),
            title=title,
            excerpt=kw.pop("excerpt", "Frequently asked questions about vacation"),
            content=kw.pop("content", "Q: How do I request vacation? A: Use the HR portal."),
            content_type=kw.pop("content_type", "faq"),
            source_type=kw.pop("source_type", "internal"),
            source_url=kw.pop("source_url", "https://hr.example.com/faq"),
            internal_url=kw.pop("internal_url", None),
            category_id=kw.pop("category_id", "hr"),
            tags=kw.pop("tags", ["hr", "vacation"]),
            view_count=kw.pop("view_count", 42),
            status=kw.pop("status", "published"),
            embedding=embedding,
            **kw,
        )

    return _make


@pytest.fixture
def make_news_post():
    def _make(content: str = "Vacation policy update\nNew rules apply from May.", pinned: bool = False, **kw):
        return NewsPost(
            id=kw.pop("id", uuid.uuid4()),
            content=content,
            type=kw.pop("type", "announcement"),
            attachments=kw.pop("attachments", []),
            pinned=pinned,
            published_at=kw.pop("published_at", CREATED_AT),
            **kw,
        )

    return _make


@pytest.fixture
def make_employee(make_user):
    def _make(job_title: str = "Vacation Planner", user: User | None = None, **kw) -> Employee:
        return Employee(
            id=kw.pop("id", uuid.uuid4()),
            job_title=job_title,
            location=kw.pop("location", "Berlin"),
            user=user if user is not None else make_user(),
            department=kw.pop("department", Department(id=uuid.uuid4(), name="People Ops")),
            **kw,
        )

    return _make


@pytest.fixture
def make_connector():
    def _make(name: str = "Company Wiki", type: str = "confluence", **kw) -> Connector:
        return Connector(id=kw.pop("id", uuid.uuid4()), name=name, type=type, status="active", **kw)

    return _make


@pytest.fixture
def make_connector_item():
    def _make(connector: Connector, title: str = "Vacation policy (wiki)", **kw) -> ConnectorItem:
        return ConnectorItem(
            id=kw.pop("id", uuid.uuid4()),
            connector_id=connector.id,
            external_id=kw.pop("external_id", "PAGE-1"),
            title=title,
            excerpt=kw.pop("excerpt", "Wiki page on vacation"),
            content=kw.pop("content", "x" * 800),
            content_type=kw.pop("content_type", "html"),
            source_url=kw.pop("source_url", "https://wiki.example.com/PAGE-1"),
            source_path=kw.pop("source_path", "HR/Policies"),
            sync_status="synced",
            **kw,
        )

    return _make
