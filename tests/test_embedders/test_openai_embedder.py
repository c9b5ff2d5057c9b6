"""Tests for OpenAIEmbedder: truncation, batching, query caching and usage tracking."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from tenacity import RetryError, wait_none

from fedsearch.common.logging import EmbeddingUsageTracker
from fedsearch.embedders.openai_embedder import BATCH_SIZE, OpenAIEmbedder


def _make_embed_response(count: int, dims: int = 1536, reverse: bool = False):
    """Create a mock embeddings response with ``count`` items."""
    data = []
    for i in range(count):
        item = Mock()
        item.embedding = [float(i) / 10] * dims
        item.index = i
        data.append(item)
    if reverse:
        data.reverse()
    usage = Mock()
    usage.total_tokens = count * 10
    response = Mock()
    response.data = data
    response.usage = usage
    return response


@pytest.fixture
def mock_client():
    with patch("fedsearch.embedders.openai_embedder.AsyncOpenAI") as mock_client_cls:
        client = AsyncMock()
        client.embeddings.create = AsyncMock(return_value=_make_embed_response(1))
        mock_client_cls.return_value = client
        yield client


class TestOpenAIEmbedder:
    async def test_embed_single_text(self, mock_client):
        embedder = OpenAIEmbedder(api_key="test-key", model="text-embedding-3-small", dims=1536)
        result = await embedder.embed_texts(["hello"])

        assert len(result) == 1
        assert len(result[0]) == 1536
        mock_client.embeddings.create.assert_called_once()

    async def test_embed_batching(self, mock_client):
        mock_client.embeddings.create = AsyncMock(
            side_effect=[_make_embed_response(BATCH_SIZE), _make_embed_response(5)]
        )
        embedder = OpenAIEmbedder(api_key="test-key", model="text-embedding-3-small", dims=1536)
        result = await embedder.embed_texts([f"text {i}" for i in range(BATCH_SIZE + 5)])

        assert len(result) == BATCH_SIZE + 5
        assert mock_client.embeddings.create.call_count == 2

    async def test_vectors_follow_input_order(self, mock_client):
        mock_client.embeddings.create = AsyncMock(return_value=_make_embed_response(3, dims=2, reverse=True))
        embedder = OpenAIEmbedder(api_key="key", dims=2)
        result = await embedder.embed_texts(["a", "b", "c"])
        assert result == [[0.0, 0.0], [0.1, 0.1], [0.2, 0.2]]

    async def test_long_text_truncated(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key", max_chars=10)
        await embedder.embed_texts(["x" * 50])
        sent = mock_client.embeddings.create.call_args.kwargs["input"]
        assert sent == ["x" * 10]

    async def test_empty_text_rejected(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key")
        with pytest.raises(ValueError, match="empty text"):
            await embedder.embed_texts(["   "])
        mock_client.embeddings.create.assert_not_called()

    async def test_count_mismatch_raises(self, mock_client):
        mock_client.embeddings.create = AsyncMock(return_value=_make_embed_response(1))
        embedder = OpenAIEmbedder(api_key="key")
        with patch.object(OpenAIEmbedder._embed_batch.retry, "wait", wait_none()):
            with pytest.raises(RetryError):
                await embedder.embed_texts(["a", "b"])
        assert mock_client.embeddings.create.call_count == 3

    async def test_properties(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key", model="custom-model", dims=768)
        assert embedder.dimensions == 768
        assert embedder.model_name == "custom-model"

    async def test_requested_dimensions_sent(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key", model="text-embedding-3-small", dims=512)
        mock_client.embeddings.create = AsyncMock(return_value=_make_embed_response(1, dims=512))
        await embedder.embed_texts(["hello"])
        kwargs = mock_client.embeddings.create.call_args.kwargs
        assert kwargs["dimensions"] == 512
        assert kwargs["model"] == "text-embedding-3-small"

    async def test_usage_tracking(self, mock_client):
        tracker = EmbeddingUsageTracker()
        embedder = OpenAIEmbedder(api_key="key", model="text-embedding-3-small", usage_tracker=tracker)
        await embedder.embed_texts(["test"])

        assert len(tracker.calls) == 1
        assert tracker.total_tokens == 10


class TestEmbedQuery:
    async def test_cache_miss_then_hit(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key")

        first = await embedder.embed_query("vacation policy")
        second = await embedder.embed_query("vacation policy")

        assert first == second
        assert mock_client.embeddings.create.call_count == 1

    async def test_cache_key_ignores_surrounding_whitespace(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key")
        await embedder.embed_query("vacation policy")
        await embedder.embed_query("  vacation policy  ")
        assert mock_client.embeddings.create.call_count == 1

    async def test_lru_eviction(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key")
        embedder._cache_max_size = 3

        for i in range(3):
            await embedder.embed_query(f"query {i}")
        assert "query 0" in embedder._cache

        await embedder.embed_query("query 3")
        assert len(embedder._cache) == 3
        assert "query 0" not in embedder._cache
        assert "query 3" in embedder._cache

    async def test_lru_access_refreshes_entry(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key")
        embedder._cache_max_size = 3

        for i in range(3):
            await embedder.embed_query(f"query {i}")
        await embedder.embed_query("query 0")
        await embedder.embed_query("query 3")

        assert "query 0" in embedder._cache
        assert "query 1" not in embedder._cache

    async def test_blank_query_rejected(self, mock_client):
        embedder = OpenAIEmbedder(api_key="key")
        with pytest.raises(ValueError):
            await embedder.embed_query("")
