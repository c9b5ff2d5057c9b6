"""Federated search: fan a query out to every selected source and merge the hits.

Each strategy runs as an independent task. The query embedding is generated at
most once per request and shared read-only by the strategies that need it;
keyword-only strategies start without waiting for it. Strategy failures and
timeouts are absorbed into a zero-count stats entry, and a failed embedding
downgrades the request to keyword-only matching.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fedsearch.common.config import Settings, settings
from fedsearch.embedders.base import BaseEmbedder
from fedsearch.search.errors import InvalidArgumentError
from fedsearch.search.live_connectors import LiveConnectorFactory
from fedsearch.search.normalizer import normalize_results
from fedsearch.search.repositories import (
    ArticleRepository,
    ConnectorRepository,
    DirectoryRepository,
    KnowledgeItemRepository,
    NewsRepository,
)
from fedsearch.search.similarity import clamp_score
from fedsearch.search.strategies import (
    ArticleStrategy,
    BaseStrategy,
    ConnectorStrategy,
    DirectoryStrategy,
    KnowledgeItemStrategy,
    NewsStrategy,
)
from fedsearch.search.types import (
    FederatedSearchParams,
    FederatedSearchResult,
    SearchResult,
    SearchSource,
    SourceStat,
)

logger = structlog.get_logger()

# Scheduling order; also the order of stats entries and of equal-score results
STRATEGY_ORDER: tuple[SearchSource, ...] = (
    SearchSource.ARTICLES,
    SearchSource.KNOWLEDGE_ITEMS,
    SearchSource.NEWS,
    SearchSource.EMPLOYEES,
    SearchSource.CONNECTORS,
)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 1)


class FederatedSearchService:
    def __init__(
        self,
        strategies: Sequence[BaseStrategy],
        embedder: BaseEmbedder | None = None,
        config: Settings | None = None,
    ) -> None:
        self._strategies = {s.source: s for s in strategies}
        self._embedder = embedder
        self._settings = config or settings

    def select_strategies(self, params: FederatedSearchParams) -> list[BaseStrategy]:
        """Strategies to run for this request, in scheduling order."""
        selected: list[BaseStrategy] = []
        for source in STRATEGY_ORDER:
            strategy = self._strategies.get(source)
            if strategy is None:
                continue
            if source is SearchSource.ARTICLES:
                wanted = SearchSource.ARTICLES in params.sources or SearchSource.INTERNAL_KB in params.sources
            elif source is SearchSource.CONNECTORS:
                wanted = params.include_connectors and SearchSource.CONNECTORS in params.sources
            else:
                wanted = source in params.sources
            if wanted:
                selected.append(strategy)
        return selected

    async def search(self, params: FederatedSearchParams) -> FederatedSearchResult:
        """Run a federated search.

        Raises:
            InvalidArgumentError: if the query is blank or pagination/score
                parameters are out of range. No source is queried in that case.
        """
        self._validate(params)
        start = time.perf_counter()
        deadline = start + self._settings.search_request_timeout_s
        query = params.query.strip()

        strategies = self.select_strategies(params)

        embedding_task: asyncio.Task[list[float] | None] | None = None
        if params.semantic_search and self._embedder is not None and any(s.uses_embedding for s in strategies):
            embedding_task = asyncio.create_task(self._embed_query(self._embedder, query))

        try:
            outcomes = await asyncio.gather(
                *(self._run_strategy(s, query, params, embedding_task, deadline) for s in strategies)
            )
        finally:
            if embedding_task is not None and not embedding_task.done():
                embedding_task.cancel()

        collected: list[SearchResult] = []
        stats: list[SourceStat] = []
        for results, stat in outcomes:
            collected.extend(results)
            stats.append(stat)

        ranked = [
            r if 0.0 <= r.score <= 1.0 else r.model_copy(update={"score": clamp_score(r.score)})
            for r in normalize_results(collected)
        ]
        ranked = [r for r in ranked if r.score >= params.min_score]
        # Stable: equal scores keep scheduling/discovery order
        ranked.sort(key=lambda r: r.score, reverse=True)

        total = len(ranked)
        page = ranked[params.offset : params.offset + params.limit]
        took_ms = _elapsed_ms(start)

        logger.info(
            "federated_search",
            query_length=len(query),
            sources=[s.source.value for s in stats],
            raw=len(collected),
            total=total,
            returned=len(page),
            took_ms=took_ms,
        )

        return FederatedSearchResult(
            results=page,
            total=total,
            sources=stats,
            query=params.query,
            took_ms=took_ms,
            has_more=params.offset + params.limit < total,
        )

    def _validate(self, params: FederatedSearchParams) -> None:
        if not params.query or not params.query.strip():
            raise InvalidArgumentError("query must not be empty")
        if params.limit < 1 or params.limit > self._settings.search_max_limit:
            raise InvalidArgumentError(f"limit must be between 1 and {self._settings.search_max_limit}")
        if params.offset < 0:
            raise InvalidArgumentError("offset must not be negative")
        if not 0.0 <= params.min_score <= 1.0:
            raise InvalidArgumentError("min_score must be between 0 and 1")

    async def _embed_query(self, embedder: BaseEmbedder, query: str) -> list[float] | None:
        """Embed the query once; any failure degrades the request to keyword-only."""
        timeout = min(self._settings.embedding_timeout_s, self._settings.search_request_timeout_s)
        start = time.perf_counter()
        try:
            embedding = await asyncio.wait_for(embedder.embed_query(query), timeout=timeout)
        except Exception:
            logger.warning(
                "query_embedding_failed",
                query_length=len(query),
                duration_ms=_elapsed_ms(start),
                exc_info=True,
            )
            return None

        if not embedding:
            logger.warning("query_embedding_empty", query_length=len(query))
            return None
        return list(embedding)

    async def _run_strategy(
        self,
        strategy: BaseStrategy,
        query: str,
        params: FederatedSearchParams,
        embedding_task: asyncio.Task[list[float] | None] | None,
        deadline: float,
    ) -> tuple[list[SearchResult], SourceStat]:
        """Run one strategy in isolation. Never raises (except on cancellation)."""
        embedding: list[float] | None = None
        if strategy.uses_embedding and embedding_task is not None:
            # Shielded: the task is shared by every semantic strategy
            embedding = await asyncio.shield(embedding_task)

        timeout = max(0.0, min(self._settings.effective_strategy_timeout_s, deadline - time.perf_counter()))
        start = time.perf_counter()
        try:
            results = await asyncio.wait_for(strategy.run(query, embedding, params), timeout=timeout)
        except TimeoutError:
            logger.warning(
                "strategy_timeout",
                source=strategy.source.value,
                timeout_s=round(timeout, 3),
                duration_ms=_elapsed_ms(start),
            )
            results = []
        except Exception:
            logger.warning(
                "strategy_failed",
                source=strategy.source.value,
                duration_ms=_elapsed_ms(start),
                exc_info=True,
            )
            results = []

        duration_ms = _elapsed_ms(start)
        return results, SourceStat(source=strategy.source, count=len(results), duration_ms=duration_ms)


def build_search_service(
    session_factory: async_sessionmaker[AsyncSession],
    embedder: BaseEmbedder | None = None,
    config: Settings | None = None,
    live_connector_factory: LiveConnectorFactory | None = None,
) -> FederatedSearchService:
    """Wire every source strategy to its PostgreSQL repository."""
    config = config or settings
    strategies: list[BaseStrategy] = [
        ArticleStrategy(ArticleRepository(session_factory), config),
        KnowledgeItemStrategy(KnowledgeItemRepository(session_factory), config),
        NewsStrategy(NewsRepository(session_factory), config),
        DirectoryStrategy(DirectoryRepository(session_factory), config),
        ConnectorStrategy(
            ConnectorRepository(session_factory),
            config,
            live_connector_factory=live_connector_factory,
        ),
    ]
    return FederatedSearchService(strategies, embedder=embedder, config=config)
