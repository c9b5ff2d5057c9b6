"""Per-source search strategies."""

from fedsearch.search.strategies.articles import ArticleStrategy
from fedsearch.search.strategies.base import BaseStrategy, SemanticStrategy
from fedsearch.search.strategies.connectors import ConnectorStrategy
from fedsearch.search.strategies.directory import DirectoryStrategy
from fedsearch.search.strategies.knowledge_items import KnowledgeItemStrategy
from fedsearch.search.strategies.news import NewsStrategy

__all__ = [
    "ArticleStrategy",
    "BaseStrategy",
    "ConnectorStrategy",
    "DirectoryStrategy",
    "KnowledgeItemStrategy",
    "NewsStrategy",
    "SemanticStrategy",
]
