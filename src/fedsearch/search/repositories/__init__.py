"""Repository Query capability for each federated search source."""

from fedsearch.search.repositories.postgres import (
    ArticleRepository,
    ConnectorRepository,
    DirectoryRepository,
    KnowledgeItemRepository,
    NewsRepository,
)
from fedsearch.search.repositories.protocols import (
    ArticleQuery,
    ConnectorQuery,
    DirectoryQuery,
    KnowledgeItemQuery,
    NewsQuery,
)

__all__ = [
    "ArticleQuery",
    "ArticleRepository",
    "ConnectorQuery",
    "ConnectorRepository",
    "DirectoryQuery",
    "DirectoryRepository",
    "KnowledgeItemQuery",
    "KnowledgeItemRepository",
    "NewsQuery",
    "NewsRepository",
]
