"""Knowledge-base article search (keyword + semantic)."""

from collections.abc import Sequence

from fedsearch.common.config import Settings
from fedsearch.common.models import Article
from fedsearch.common.utils import truncate
from fedsearch.search.repositories.protocols import ArticleQuery
from fedsearch.search.strategies.base import PREVIEW_CHARS, SemanticStrategy
from fedsearch.search.types import Author, FederatedSearchParams, SearchResult, SearchSource


class ArticleStrategy(SemanticStrategy):
    source = SearchSource.ARTICLES

    def __init__(self, repository: ArticleQuery, config: Settings | None = None) -> None:
        super().__init__(config)
        self._repository = repository

    async def run(
        self,
        query: str,
        embedding: Sequence[float] | None,
        params: FederatedSearchParams,
    ) -> list[SearchResult]:
        limit = self._limit(params)
        articles = await self._repository.find_by_keyword(query, limit)
        results = [self._keyword_hit(a) for a in articles]

        if embedding is not None:
            candidates = await self._repository.find_candidates_with_vector(limit)
            self.merge_semantic_hits(results, candidates, embedding, self._semantic_hit)

        return results

    def _keyword_hit(self, article: Article) -> SearchResult:
        author = None
        if article.author is not None:
            author = Author(
                id=str(article.author.id),
                name=article.author.full_name or article.author.email,
                avatar_url=article.author.avatar_url,
            )
        return SearchResult(
            id=f"article-{article.id}",
            source=SearchSource.ARTICLES,
            source_id=str(article.id),
            title=article.title,
            excerpt=article.excerpt,
            content=truncate(article.content, PREVIEW_CHARS),
            content_type="html",
            url=f"/diq/content/{article.slug}",
            author=author,
            category=article.category.name if article.category else None,
            score=self._settings.article_score,
            created_at=article.created_at,
            updated_at=article.updated_at,
        )

    @staticmethod
    def _semantic_hit(article: Article, similarity: float) -> SearchResult:
        return SearchResult(
            id=f"article-{article.id}",
            source=SearchSource.ARTICLES,
            source_id=str(article.id),
            title=article.title,
            excerpt=article.excerpt,
            url=f"/diq/content/{article.slug}",
            category=article.category.name if article.category else None,
            score=similarity,
            created_at=article.created_at,
        )
