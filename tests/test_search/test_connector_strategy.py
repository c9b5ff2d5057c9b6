"""Tests for ConnectorStrategy: synced items and opt-in live search."""

import uuid
from unittest.mock import AsyncMock, Mock

import pytest

from fedsearch.common.config import Settings
from fedsearch.search.live_connectors import LIVE_SEARCH_LIMIT, BaseLiveConnector, LiveConnectorItem
from fedsearch.search.strategies import ConnectorStrategy
from fedsearch.search.types import ConnectorMetadata, SearchSource


class FakeLiveConnector(BaseLiveConnector):
    def __init__(self, items=None, error: Exception | None = None):
        self.items = items or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def search(self, query, limit=LIVE_SEARCH_LIMIT):
        self.calls.append((query, limit))
        if self.error is not None:
            raise self.error
        return self.items


@pytest.fixture
def repo():
    repo = AsyncMock()
    repo.find_active_connectors.return_value = []
    repo.find_synced_items.return_value = []
    return repo


@pytest.fixture
def strategy(repo, test_settings):
    return ConnectorStrategy(repo, test_settings)


class TestSyncedItems:
    async def test_no_active_connectors(self, strategy, repo, make_params):
        assert await strategy.run("vacation", None, make_params()) == []
        repo.find_synced_items.assert_not_called()

    async def test_maps_item(self, strategy, repo, make_connector, make_connector_item, make_params):
        connector = make_connector()
        item = make_connector_item(connector, author_id="u-7", author_name="Wiki Bot", tags=["hr"])
        repo.find_active_connectors.return_value = [connector]
        repo.find_synced_items.return_value = [item]

        results = await strategy.run("vacation", None, make_params())

        assert len(results) == 1
        hit = results[0]
        assert hit.id == f"connector-{item.id}"
        assert hit.source is SearchSource.CONNECTORS
        assert hit.score == 0.6
        assert hit.url == "https://wiki.example.com/PAGE-1"
        assert hit.content == "x" * 500
        assert hit.author.name == "Wiki Bot"
        assert hit.tags == ["hr"]
        assert isinstance(hit.metadata, ConnectorMetadata)
        assert hit.metadata.connector_type == "confluence"
        assert hit.metadata.connector_name == "Company Wiki"
        assert hit.metadata.source_path == "HR/Policies"
        assert hit.metadata.live is False

    async def test_item_without_author(self, strategy, repo, make_connector, make_connector_item, make_params):
        connector = make_connector()
        repo.find_active_connectors.return_value = [connector]
        repo.find_synced_items.return_value = [make_connector_item(connector)]

        hit = (await strategy.run("vacation", None, make_params()))[0]
        assert hit.author is None

    async def test_filters_forwarded(self, strategy, repo, make_connector, make_params):
        connector = make_connector()
        repo.find_active_connectors.return_value = [connector]
        org, space = uuid.uuid4(), uuid.uuid4()
        params = make_params(limit=6, organization_id=org, kb_space_ids=[space], content_types=["html"])

        await strategy.run("vacation", None, params)

        repo.find_active_connectors.assert_awaited_once_with(organization_id=org, kb_space_ids=[space])
        repo.find_synced_items.assert_awaited_once_with(
            "vacation", 6, connector_ids=[connector.id], content_types=["html"]
        )


class TestLiveSearch:
    def test_disabled_by_default(self, repo, test_settings):
        strategy = ConnectorStrategy(repo, test_settings, live_connector_factory=Mock())
        assert strategy.live_search_enabled is False

    def test_requires_factory(self, repo, test_settings):
        strategy = ConnectorStrategy(repo, test_settings, search_live=True)
        assert strategy.live_search_enabled is False

    async def test_live_switch_without_factory_skips_live_search(
        self, repo, test_settings, make_connector, make_params
    ):
        connector = make_connector()
        repo.find_active_connectors.return_value = [connector]
        strategy = ConnectorStrategy(repo, test_settings, search_live=True)

        results = await strategy.run("vacation", None, make_params())

        assert results == []
        repo.find_synced_items.assert_awaited_once()

    def test_enabled_by_setting(self, repo):
        config = Settings(_env_file=None, connector_live_search=True)
        strategy = ConnectorStrategy(repo, config, live_connector_factory=Mock())
        assert strategy.live_search_enabled is True

    async def test_factory_not_called_when_disabled(self, repo, test_settings, make_connector, make_params):
        factory = Mock()
        repo.find_active_connectors.return_value = [make_connector()]
        strategy = ConnectorStrategy(repo, test_settings, live_connector_factory=factory)

        await strategy.run("vacation", None, make_params())

        factory.assert_not_called()

    async def test_live_hits_appended(self, repo, test_settings, make_connector, make_params):
        connector = make_connector(type="sharepoint", name="Intranet Docs")
        live = FakeLiveConnector(items=[LiveConnectorItem(external_id="doc-9", title="Vacation form")])
        repo.find_active_connectors.return_value = [connector]
        strategy = ConnectorStrategy(repo, test_settings, live_connector_factory=lambda c: live, search_live=True)

        results = await strategy.run("vacation", None, make_params())

        assert live.calls == [("vacation", LIVE_SEARCH_LIMIT)]
        assert len(results) == 1
        hit = results[0]
        assert hit.id == "live-sharepoint-doc-9"
        assert hit.source_id == "doc-9"
        assert hit.score == 0.5
        assert hit.metadata.live is True
        assert hit.metadata.connector_name == "Intranet Docs"

    async def test_failing_connector_isolated(self, repo, test_settings, make_connector, make_params):
        good = make_connector(type="confluence")
        bad = make_connector(type="sharepoint")
        connectors = {
            good.id: FakeLiveConnector(items=[LiveConnectorItem(external_id="p1", title="Vacation page")]),
            bad.id: FakeLiveConnector(error=ConnectionError("unreachable")),
        }
        repo.find_active_connectors.return_value = [good, bad]
        strategy = ConnectorStrategy(
            repo, test_settings, live_connector_factory=lambda c: connectors[c.id], search_live=True
        )

        results = await strategy.run("vacation", None, make_params())

        assert [r.id for r in results] == ["live-confluence-p1"]
