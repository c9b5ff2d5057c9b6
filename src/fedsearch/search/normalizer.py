"""Global deduplication of hits collected from all strategies."""

from fedsearch.search.types import SearchResult, SearchSource


def normalize_results(results: list[SearchResult]) -> list[SearchResult]:
    """Collapse hits sharing a ``(source, source_id)`` key, keeping the highest score.

    On equal scores the first-seen hit is kept. Output follows first-seen key order.
    """
    seen: dict[tuple[SearchSource, str], SearchResult] = {}
    for result in results:
        key = result.dedup_key
        existing = seen.get(key)
        if existing is None or result.score > existing.score:
            seen[key] = result
    return list(seen.values())
