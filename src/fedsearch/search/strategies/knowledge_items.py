"""Unified knowledge-item search (keyword + semantic)."""

from collections.abc import Sequence

from fedsearch.common.config import Settings
from fedsearch.common.models import KnowledgeItem
from fedsearch.common.utils import truncate
from fedsearch.search.repositories.protocols import KnowledgeItemQuery
from fedsearch.search.strategies.base import PREVIEW_CHARS, SemanticStrategy
from fedsearch.search.types import FederatedSearchParams, KnowledgeItemMetadata, SearchResult, SearchSource


class KnowledgeItemStrategy(SemanticStrategy):
    source = SearchSource.KNOWLEDGE_ITEMS

    def __init__(self, repository: KnowledgeItemQuery, config: Settings | None = None) -> None:
        super().__init__(config)
        self._repository = repository

    async def run(
        self,
        query: str,
        embedding: Sequence[float] | None,
        params: FederatedSearchParams,
    ) -> list[SearchResult]:
        limit = self._limit(params)
        items = await self._repository.find_by_keyword(
            query,
            limit,
            content_types=params.content_types,
            kb_space_ids=params.kb_space_ids,
        )
        results = [self._keyword_hit(item) for item in items]

        if embedding is not None:
            candidates = await self._repository.find_candidates_with_vector(
                limit,
                content_types=params.content_types,
                kb_space_ids=params.kb_space_ids,
            )
            self.merge_semantic_hits(results, candidates, embedding, self._semantic_hit)

        return results

    def _keyword_hit(self, item: KnowledgeItem) -> SearchResult:
        return SearchResult(
            id=f"ki-{item.id}",
            source=SearchSource.KNOWLEDGE_ITEMS,
            source_id=str(item.id),
            title=item.title,
            excerpt=item.excerpt,
            content=truncate(item.content, PREVIEW_CHARS),
            content_type=item.content_type,
            url=item.internal_url or item.source_url,
            category=item.category_id,
            tags=item.tags,
            score=self._settings.knowledge_item_score,
            metadata=KnowledgeItemMetadata(source_type=item.source_type, view_count=item.view_count or 0),
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

    @staticmethod
    def _semantic_hit(item: KnowledgeItem, similarity: float) -> SearchResult:
        return SearchResult(
            id=f"ki-{item.id}",
            source=SearchSource.KNOWLEDGE_ITEMS,
            source_id=str(item.id),
            title=item.title,
            excerpt=item.excerpt,
            url=item.internal_url or item.source_url,
            tags=item.tags,
            score=similarity,
        )
