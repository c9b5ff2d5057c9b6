"""Live search against external connector APIs.

Querying an external system at search time is slow, so the connector strategy
only does it when live search is explicitly enabled and a factory is supplied.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import BaseModel

from fedsearch.common.models import Connector
from fedsearch.search.types import Author

LIVE_SEARCH_LIMIT = 10


class LiveConnectorItem(BaseModel):
    """A hit returned directly by an external system's search API."""

    external_id: str
    title: str
    excerpt: str | None = None
    content_type: str | None = None
    source_url: str | None = None
    author: Author | None = None


class BaseLiveConnector(ABC):
    @abstractmethod
    async def search(self, query: str, limit: int = LIVE_SEARCH_LIMIT) -> list[LiveConnectorItem]:
        """Search the external system directly."""
        ...


LiveConnectorFactory = Callable[[Connector], BaseLiveConnector]
