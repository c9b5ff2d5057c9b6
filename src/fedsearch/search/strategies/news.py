"""News feed search (keyword only)."""

from collections.abc import Sequence

from fedsearch.common.config import Settings
from fedsearch.common.models import NewsPost
from fedsearch.search.repositories.protocols import NewsQuery
from fedsearch.search.strategies.base import BaseStrategy
from fedsearch.search.types import Author, FederatedSearchParams, NewsMetadata, SearchResult, SearchSource

TITLE_CHARS = 100
EXCERPT_CHARS = 200
FALLBACK_TITLE = "News Post"


def news_title(content: str) -> str:
    """First line of the post, truncated; posts have no separate title."""
    return content.split("\n", 1)[0][:TITLE_CHARS] or FALLBACK_TITLE


class NewsStrategy(BaseStrategy):
    source = SearchSource.NEWS

    def __init__(self, repository: NewsQuery, config: Settings | None = None) -> None:
        super().__init__(config)
        self._repository = repository

    async def run(
        self,
        query: str,
        embedding: Sequence[float] | None,
        params: FederatedSearchParams,
    ) -> list[SearchResult]:
        posts = await self._repository.find_by_keyword(query, self._limit(params))
        return [self._hit(post) for post in posts]

    def _hit(self, post: NewsPost) -> SearchResult:
        content = post.content or ""
        author = None
        if post.author is not None:
            author = Author(
                id=str(post.author.id),
                name=post.author.full_name or post.author.email,
                avatar_url=post.author.avatar_url,
            )
        # Pinning replaces the base score rather than boosting it
        score = self._settings.news_pinned_score if post.pinned else self._settings.news_score
        return SearchResult(
            id=f"news-{post.id}",
            source=SearchSource.NEWS,
            source_id=str(post.id),
            title=news_title(content),
            excerpt=content[:EXCERPT_CHARS],
            content_type="text",
            url=f"/diq/news/{post.id}",
            author=author,
            score=score,
            metadata=NewsMetadata(
                type=post.type,
                pinned=bool(post.pinned),
                attachments_count=len(post.attachments or []),
            ),
            created_at=post.published_at,
        )
