"""Repository Query capability consumed by the search strategies.

Strategies depend on these structural interfaces rather than on SQLAlchemy, so
any store that returns bounded, status-filtered rows can back a source.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from fedsearch.common.models import Article, Connector, ConnectorItem, Employee, KnowledgeItem, NewsPost, User


@runtime_checkable
class ArticleQuery(Protocol):
    async def find_by_keyword(self, query: str, limit: int) -> Sequence[Article]: ...

    async def find_candidates_with_vector(self, limit: int) -> Sequence[Article]: ...


@runtime_checkable
class KnowledgeItemQuery(Protocol):
    async def find_by_keyword(
        self,
        query: str,
        limit: int,
        content_types: list[str] | None = None,
        kb_space_ids: list[uuid.UUID] | None = None,
    ) -> Sequence[KnowledgeItem]: ...

    async def find_candidates_with_vector(
        self,
        limit: int,
        content_types: list[str] | None = None,
        kb_space_ids: list[uuid.UUID] | None = None,
    ) -> Sequence[KnowledgeItem]: ...


@runtime_checkable
class NewsQuery(Protocol):
    async def find_by_keyword(self, query: str, limit: int) -> Sequence[NewsPost]: ...


@runtime_checkable
class DirectoryQuery(Protocol):
    async def find_employees(
        self, query: str, limit: int, organization_id: uuid.UUID | None = None
    ) -> Sequence[Employee]: ...

    async def find_users(
        self, query: str, limit: int, organization_id: uuid.UUID | None = None
    ) -> Sequence[User]: ...


@runtime_checkable
class ConnectorQuery(Protocol):
    async def find_active_connectors(
        self,
        organization_id: uuid.UUID | None = None,
        kb_space_ids: list[uuid.UUID] | None = None,
    ) -> Sequence[Connector]: ...

    async def find_synced_items(
        self,
        query: str,
        limit: int,
        connector_ids: list,
        content_types: list[str] | None = None,
    ) -> Sequence[ConnectorItem]: ...
