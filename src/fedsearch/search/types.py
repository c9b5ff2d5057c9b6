"""Types for federated search requests, hits, and responses."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class SearchSource(str, Enum):
    """Content repositories a federated search can draw from."""

    INTERNAL_KB = "internal_kb"
    ARTICLES = "articles"
    CONNECTORS = "connectors"
    KNOWLEDGE_ITEMS = "knowledge_items"
    NEWS = "news"
    EMPLOYEES = "employees"


DEFAULT_SOURCES: frozenset[SearchSource] = frozenset(
    {SearchSource.INTERNAL_KB, SearchSource.ARTICLES, SearchSource.KNOWLEDGE_ITEMS}
)


class Author(BaseModel):
    id: str
    name: str
    avatar_url: str | None = None


class Highlight(BaseModel):
    title: str | None = None
    content: str | None = None


# ── Per-source metadata payloads ────────────────────────────────────────


class KnowledgeItemMetadata(BaseModel):
    kind: Literal["knowledge_item"] = "knowledge_item"
    source_type: str | None = None
    view_count: int = 0


class NewsMetadata(BaseModel):
    kind: Literal["news"] = "news"
    type: str | None = None
    pinned: bool = False
    attachments_count: int = 0


class EmployeeMetadata(BaseModel):
    kind: Literal["employee"] = "employee"
    job_title: str | None = None
    department: str | None = None
    location: str | None = None
    email: str | None = None


class ConnectorMetadata(BaseModel):
    kind: Literal["connector"] = "connector"
    connector_type: str | None = None
    connector_name: str | None = None
    source_path: str | None = None
    live: bool = False


ResultMetadata = Annotated[
    KnowledgeItemMetadata | NewsMetadata | EmployeeMetadata | ConnectorMetadata,
    Field(discriminator="kind"),
]


class SearchResult(BaseModel):
    """One normalized hit, regardless of which source produced it.

    ``(source, source_id)`` identifies the underlying item and is the
    deduplication key across strategies.
    """

    id: str
    source: SearchSource
    source_id: str
    title: str
    excerpt: str | None = None
    content: str | None = None
    content_type: str | None = None
    url: str | None = None
    thumbnail_url: str | None = None
    author: Author | None = None
    category: str | None = None
    tags: list[str] | None = None
    score: float
    highlight: Highlight | None = None
    metadata: ResultMetadata | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def dedup_key(self) -> tuple[SearchSource, str]:
        return (self.source, self.source_id)


class FederatedSearchParams(BaseModel):
    query: str
    sources: set[SearchSource] = Field(default_factory=lambda: set(DEFAULT_SOURCES))
    content_types: list[str] | None = None
    kb_space_ids: list[uuid.UUID] | None = None
    organization_id: uuid.UUID | None = None
    user_id: str | None = None
    limit: int = 20
    offset: int = 0
    min_score: float = 0.1
    semantic_search: bool = True
    include_connectors: bool = True


class SourceStat(BaseModel):
    source: SearchSource
    count: int
    duration_ms: float


class FederatedSearchResult(BaseModel):
    results: list[SearchResult]
    total: int
    sources: list[SourceStat]
    query: str
    took_ms: float
    has_more: bool
