"""Abstract base class for query embedding clients."""

from abc import ABC, abstractmethod


class BaseEmbedder(ABC):
    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of texts into vectors."""
        ...

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single search query. Override for caching support."""
        embeddings = await self.embed_texts([text])
        if not embeddings:
            raise ValueError("No embedding returned for query")
        return embeddings[0]

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """The dimensionality of the embedding vectors."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """The name/ID of the embedding model."""
        ...
