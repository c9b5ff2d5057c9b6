"""OpenAI embedding implementation with batching, retry, truncation, and caching."""

import time
from collections import OrderedDict

import structlog
from openai import AsyncOpenAI
from tenacity import retry, stop_after_attempt, wait_exponential

from fedsearch.common.config import settings
from fedsearch.common.logging import EmbeddingUsageTracker
from fedsearch.embedders.base import BaseEmbedder

logger = structlog.get_logger()

BATCH_SIZE = 100  # OpenAI recommends max 2048, but 100 is safer for rate limits


class OpenAIEmbedder(BaseEmbedder):
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dims: int | None = None,
        max_chars: int | None = None,
        usage_tracker: EmbeddingUsageTracker | None = None,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key or settings.openai_api_key)
        self._model = model or settings.embedding_model
        self._dims = dims or settings.embedding_dims
        self._max_chars = max_chars or settings.embedding_max_chars
        self._usage_tracker = usage_tracker
        # In-memory LRU cache: truncated query text -> embedding vector
        self._cache: OrderedDict[str, list[float]] = OrderedDict()
        self._cache_max_size = 10_000

    @property
    def dimensions(self) -> int:
        return self._dims

    @property
    def model_name(self) -> str:
        return self._model

    def _prepare(self, text: str) -> str:
        prepared = text[: self._max_chars].strip()
        if not prepared:
            raise ValueError("Cannot generate embedding for empty text")
        return prepared

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with truncation, batching and retry."""
        prepared = [self._prepare(t) for t in texts]
        all_embeddings: list[list[float]] = []

        for i in range(0, len(prepared), BATCH_SIZE):
            batch = prepared[i : i + BATCH_SIZE]
            batch_embeddings = await self._embed_batch(batch)
            all_embeddings.extend(batch_embeddings)

        return all_embeddings

    async def embed_query(self, text: str) -> list[float]:
        """Embed one query, reusing the vector of an identical earlier query."""
        key = self._prepare(text)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            logger.debug("embedding_cache_hit", query_length=len(key))
            return cached

        embeddings = await self._embed_batch([key])
        if not embeddings:
            raise ValueError("No embedding returned from OpenAI API")
        embedding = embeddings[0]

        self._cache[key] = embedding
        if len(self._cache) > self._cache_max_size:
            self._cache.popitem(last=False)
        return embedding

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=30))
    async def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        start = time.perf_counter()
        response = await self._client.embeddings.create(
            model=self._model,
            input=texts,
            dimensions=self._dims,
        )
        latency_ms = (time.perf_counter() - start) * 1000

        # Sort by index so vectors line up with their inputs
        data = sorted(response.data, key=lambda item: item.index)
        embeddings = [item.embedding for item in data]
        if len(embeddings) != len(texts):
            raise ValueError(f"Expected {len(texts)} embeddings from OpenAI API, got {len(embeddings)}")
        total_tokens = response.usage.total_tokens if response.usage else 0

        if self._usage_tracker:
            self._usage_tracker.record(self._model, total_tokens, latency_ms)

        logger.info(
            "embed_batch",
            model=self._model,
            count=len(texts),
            tokens=total_tokens,
            latency_ms=round(latency_ms, 1),
        )

        return embeddings
