"""PostgreSQL-backed repositories for each federated search source.

Every call opens its own session so strategies running concurrently never
share one.
"""

import uuid
from collections.abc import Sequence

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from fedsearch.common.models import Article, Connector, ConnectorItem, Employee, KnowledgeItem, NewsPost, User
from fedsearch.common.utils import contains_pattern

PUBLISHED = "published"
TS_CONFIG = "english"


class _SessionRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _scalars(self, stmt: Select) -> list:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())


class ArticleRepository(_SessionRepository):
    async def find_by_keyword(self, query: str, limit: int) -> Sequence[Article]:
        """Published articles whose title matches a web-search style query."""
        matches = func.to_tsvector(TS_CONFIG, Article.title).op("@@")(func.websearch_to_tsquery(TS_CONFIG, query))
        stmt = (
            select(Article)
            .options(selectinload(Article.category), selectinload(Article.author))
            .where(matches, Article.status == PUBLISHED)
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def find_candidates_with_vector(self, limit: int) -> Sequence[Article]:
        stmt = (
            select(Article)
            .options(selectinload(Article.category))
            .where(Article.status == PUBLISHED, Article.embedding.is_not(None))
            .limit(limit)
        )
        return await self._scalars(stmt)


class KnowledgeItemRepository(_SessionRepository):
    @staticmethod
    def _filtered(
        stmt: Select, content_types: list[str] | None, kb_space_ids: list[uuid.UUID] | None
    ) -> Select:
        stmt = stmt.where(KnowledgeItem.status == PUBLISHED)
        if content_types:
            stmt = stmt.where(KnowledgeItem.content_type.in_(content_types))
        if kb_space_ids:
            stmt = stmt.where(KnowledgeItem.kb_space_id.in_(kb_space_ids))
        return stmt

    async def find_by_keyword(
        self,
        query: str,
        limit: int,
        content_types: list[str] | None = None,
        kb_space_ids: list[uuid.UUID] | None = None,
    ) -> Sequence[KnowledgeItem]:
        """Published items whose precomputed search vector matches the query."""
        matches = KnowledgeItem.search_vector.op("@@")(func.plainto_tsquery(TS_CONFIG, query))
        stmt = self._filtered(select(KnowledgeItem).where(matches), content_types, kb_space_ids)
        return await self._scalars(stmt.limit(limit))

    async def find_candidates_with_vector(
        self,
        limit: int,
        content_types: list[str] | None = None,
        kb_space_ids: list[uuid.UUID] | None = None,
    ) -> Sequence[KnowledgeItem]:
        stmt = self._filtered(
            select(KnowledgeItem).where(KnowledgeItem.embedding.is_not(None)), content_types, kb_space_ids
        )
        return await self._scalars(stmt.limit(limit))


class NewsRepository(_SessionRepository):
    async def find_by_keyword(self, query: str, limit: int) -> Sequence[NewsPost]:
        """Published posts containing the query, newest first."""
        stmt = (
            select(NewsPost)
            .options(selectinload(NewsPost.author))
            .where(NewsPost.content.ilike(contains_pattern(query)), NewsPost.published_at.is_not(None))
            .order_by(NewsPost.published_at.desc())
            .limit(limit)
        )
        return await self._scalars(stmt)


class DirectoryRepository(_SessionRepository):
    async def find_employees(
        self, query: str, limit: int, organization_id: uuid.UUID | None = None
    ) -> Sequence[Employee]:
        """Employee profiles matching on job title or location."""
        pattern = contains_pattern(query)
        stmt = (
            select(Employee)
            .options(selectinload(Employee.user), selectinload(Employee.department))
            .where(or_(Employee.job_title.ilike(pattern), Employee.location.ilike(pattern)))
        )
        if organization_id:
            stmt = stmt.join(User, Employee.user_id == User.id).where(User.organization_id == organization_id)
        return await self._scalars(stmt.limit(limit))

    async def find_users(
        self, query: str, limit: int, organization_id: uuid.UUID | None = None
    ) -> Sequence[User]:
        """User accounts matching on full name."""
        stmt = select(User).where(User.full_name.ilike(contains_pattern(query)))
        if organization_id:
            stmt = stmt.where(User.organization_id == organization_id)
        return await self._scalars(stmt.limit(limit))


class ConnectorRepository(_SessionRepository):
    async def find_active_connectors(
        self,
        organization_id: uuid.UUID | None = None,
        kb_space_ids: list[uuid.UUID] | None = None,
    ) -> Sequence[Connector]:
        stmt = select(Connector).where(Connector.status == "active")
        if organization_id:
            stmt = stmt.where(Connector.organization_id == organization_id)
        if kb_space_ids:
            stmt = stmt.where(Connector.kb_space_id.in_(kb_space_ids))
        return await self._scalars(stmt)

    async def find_synced_items(
        self,
        query: str,
        limit: int,
        connector_ids: list,
        content_types: list[str] | None = None,
    ) -> Sequence[ConnectorItem]:
        """Items already synced from the given connectors whose title contains the query."""
        stmt = select(ConnectorItem).where(
            ConnectorItem.sync_status == "synced",
            ConnectorItem.title.ilike(contains_pattern(query)),
            ConnectorItem.connector_id.in_(connector_ids),
        )
        if content_types:
            stmt = stmt.where(ConnectorItem.content_type.in_(content_types))
        return await self._scalars(stmt.limit(limit))
