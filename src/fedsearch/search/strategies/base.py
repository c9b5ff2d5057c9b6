"""Base classes for per-source search strategies."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Any, ClassVar, TypeVar

from fedsearch.common.config import Settings, settings
from fedsearch.search.similarity import clamp_score, cosine_similarity
from fedsearch.search.types import FederatedSearchParams, SearchResult, SearchSource

PREVIEW_CHARS = 500

T = TypeVar("T")


class BaseStrategy(ABC):
    """Searches one source and returns its hits with scores in [0, 1].

    Repository errors propagate to the caller; the orchestrator isolates them.
    """

    source: ClassVar[SearchSource]
    uses_embedding: ClassVar[bool] = False

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or settings

    @abstractmethod
    async def run(
        self,
        query: str,
        embedding: Sequence[float] | None,
        params: FederatedSearchParams,
    ) -> list[SearchResult]: ...

    def _limit(self, params: FederatedSearchParams) -> int:
        return params.limit or self._settings.search_candidate_limit


class SemanticStrategy(BaseStrategy):
    """Strategy that blends a keyword pass with a vector-similarity pass."""

    uses_embedding: ClassVar[bool] = True

    def merge_semantic_hits(
        self,
        results: list[SearchResult],
        candidates: Iterable[T],
        embedding: Sequence[float],
        to_result: Callable[[T, float], SearchResult],
    ) -> list[SearchResult]:
        """Score candidates against the query embedding and fold them into ``results``.

        Candidates under the acceptance threshold, or whose vector yields no finite
        similarity, are dropped. A candidate that the
        keyword pass already found boosts that hit instead of adding a second entry.
        """
        threshold = self._settings.semantic_threshold
        boost = self._settings.semantic_boost
        positions = {r.source_id: i for i, r in enumerate(results)}

        for candidate in candidates:
            vector: Any = getattr(candidate, "embedding", None)
            if not vector:
                continue

            similarity = cosine_similarity(embedding, vector)
            if not math.isfinite(similarity) or similarity < threshold:
                continue

            source_id = str(getattr(candidate, "id"))
            idx = positions.get(source_id)
            if idx is not None:
                existing = results[idx]
                results[idx] = existing.model_copy(update={"score": min(1.0, existing.score + similarity * boost)})
                continue

            positions[source_id] = len(results)
            results.append(to_result(candidate, clamp_score(similarity)))

        return results
