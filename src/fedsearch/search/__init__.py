"""Federated search core -- fan-out across sources, dedup, and ranking."""

from fedsearch.search.errors import InvalidArgumentError
from fedsearch.search.highlight import highlight_matches
from fedsearch.search.normalizer import normalize_results
from fedsearch.search.orchestrator import FederatedSearchService, build_search_service
from fedsearch.search.similarity import clamp_score, cosine_similarity
from fedsearch.search.types import (
    FederatedSearchParams,
    FederatedSearchResult,
    SearchResult,
    SearchSource,
    SourceStat,
)

__all__ = [
    "FederatedSearchParams",
    "FederatedSearchResult",
    "FederatedSearchService",
    "InvalidArgumentError",
    "SearchResult",
    "SearchSource",
    "SourceStat",
    "build_search_service",
    "clamp_score",
    "cosine_similarity",
    "highlight_matches",
    "normalize_results",
]
