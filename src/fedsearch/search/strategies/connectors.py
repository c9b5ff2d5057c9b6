"""Search over items synced from external connectors (Confluence, SharePoint, ...)."""

import asyncio
from collections.abc import Sequence

import structlog

from fedsearch.common.config import Settings
from fedsearch.common.models import Connector, ConnectorItem
from fedsearch.common.utils import truncate
from fedsearch.search.live_connectors import LIVE_SEARCH_LIMIT, LiveConnectorFactory, LiveConnectorItem
from fedsearch.search.repositories.protocols import ConnectorQuery
from fedsearch.search.strategies.base import PREVIEW_CHARS, BaseStrategy
from fedsearch.search.types import Author, ConnectorMetadata, FederatedSearchParams, SearchResult, SearchSource

logger = structlog.get_logger()


class ConnectorStrategy(BaseStrategy):
    """Searches previously synced connector items.

    Live search against each connector's own API is opt-in: it needs both
    ``search_live`` (defaulting to the ``connector_live_search`` setting) and a
    ``live_connector_factory``.
    """

    source = SearchSource.CONNECTORS

    def __init__(
        self,
        repository: ConnectorQuery,
        config: Settings | None = None,
        live_connector_factory: LiveConnectorFactory | None = None,
        search_live: bool | None = None,
    ) -> None:
        super().__init__(config)
        self._repository = repository
        self._live_connector_factory = live_connector_factory
        self._search_live = self._settings.connector_live_search if search_live is None else search_live

    @property
    def live_search_enabled(self) -> bool:
        return self._search_live and self._live_connector_factory is not None

    async def run(
        self,
        query: str,
        embedding: Sequence[float] | None,
        params: FederatedSearchParams,
    ) -> list[SearchResult]:
        connectors = await self._repository.find_active_connectors(
            organization_id=params.organization_id,
            kb_space_ids=params.kb_space_ids,
        )
        if not connectors:
            return []

        by_id = {c.id: c for c in connectors}
        items = await self._repository.find_synced_items(
            query,
            self._limit(params),
            connector_ids=list(by_id),
            content_types=params.content_types,
        )
        results = [self._synced_hit(item, by_id.get(item.connector_id)) for item in items]

        factory = self._live_connector_factory
        if self._search_live and factory is not None:
            results.extend(await self._search_live_connectors(factory, query, connectors))

        return results

    def _synced_hit(self, item: ConnectorItem, connector: Connector | None) -> SearchResult:
        author = None
        if item.author_name:
            author = Author(id=item.author_id or "", name=item.author_name, avatar_url=item.author_avatar_url)
        return SearchResult(
            id=f"connector-{item.id}",
            source=SearchSource.CONNECTORS,
            source_id=str(item.id),
            title=item.title,
            excerpt=item.excerpt,
            content=truncate(item.content, PREVIEW_CHARS),
            content_type=item.content_type,
            url=item.source_url,
            author=author,
            tags=item.tags,
            score=self._settings.connector_score,
            metadata=ConnectorMetadata(
                connector_type=connector.type if connector else None,
                connector_name=connector.name if connector else None,
                source_path=item.source_path,
            ),
            created_at=item.external_created_at,
            updated_at=item.external_updated_at,
        )

    async def _search_live_connectors(
        self, factory: LiveConnectorFactory, query: str, connectors: Sequence[Connector]
    ) -> list[SearchResult]:
        """Query each connector's API; a failing connector contributes nothing."""

        async def search_one(connector: Connector) -> list[LiveConnectorItem]:
            return await factory(connector).search(query, limit=LIVE_SEARCH_LIMIT)

        outcomes = await asyncio.gather(*(search_one(c) for c in connectors), return_exceptions=True)

        results: list[SearchResult] = []
        for connector, outcome in zip(connectors, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "live_connector_search_failed",
                    connector_id=str(connector.id),
                    connector_type=connector.type,
                    error=str(outcome),
                )
                continue
            results.extend(self._live_hit(item, connector) for item in outcome)
        return results

    def _live_hit(self, item: LiveConnectorItem, connector: Connector) -> SearchResult:
        return SearchResult(
            id=f"live-{connector.type}-{item.external_id}",
            source=SearchSource.CONNECTORS,
            source_id=item.external_id,
            title=item.title,
            excerpt=item.excerpt,
            content_type=item.content_type,
            url=item.source_url,
            author=item.author,
            score=self._settings.live_connector_score,
            metadata=ConnectorMetadata(
                connector_type=connector.type,
                connector_name=connector.name,
                live=True,
            ),
        )
