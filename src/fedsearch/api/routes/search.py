"""Federated search endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from fedsearch.api.deps import get_search_service
from fedsearch.common.config import settings
from fedsearch.search.errors import InvalidArgumentError
from fedsearch.search.highlight import highlight_matches
from fedsearch.search.orchestrator import FederatedSearchService
from fedsearch.search.types import (
    FederatedSearchParams,
    FederatedSearchResult,
    Highlight,
    SearchSource,
)

router = APIRouter()

MIN_QUERY_LENGTH = 2
HTTP_DEFAULT_SOURCES = [SearchSource.ARTICLES, SearchSource.KNOWLEDGE_ITEMS, SearchSource.NEWS]


class FederatedSearchRequest(BaseModel):
    query: str
    sources: list[SearchSource] | None = None
    content_types: list[str] | None = None
    kb_space_ids: list[uuid.UUID] | None = None
    organization_id: uuid.UUID | None = None
    user_id: str | None = None
    limit: int = Field(default=settings.search_default_limit, ge=1, le=settings.search_max_limit)
    offset: int = Field(default=0, ge=0)
    min_score: float = Field(default=settings.search_default_min_score, ge=0.0, le=1.0)
    include_connectors: bool = True
    semantic_search: bool = True
    highlight: bool = True


def _checked_query(query: str | None) -> str:
    if not query or len(query.strip()) < MIN_QUERY_LENGTH:
        raise HTTPException(status_code=400, detail=f"Query must be at least {MIN_QUERY_LENGTH} characters")
    return query.strip()


def _add_highlights(result: FederatedSearchResult, query: str) -> None:
    for item in result.results:
        item.highlight = Highlight(
            title=highlight_matches(item.title, query),
            content=highlight_matches(item.excerpt, query) if item.excerpt else None,
        )


async def _run(service: FederatedSearchService, params: FederatedSearchParams) -> FederatedSearchResult:
    try:
        return await service.search(params)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/search/federated", response_model=FederatedSearchResult, response_model_exclude_none=True)
async def federated_search(
    body: FederatedSearchRequest,
    service: FederatedSearchService = Depends(get_search_service),
):
    """Search every selected knowledge source and return one ranked list."""
    query = _checked_query(body.query)
    params = FederatedSearchParams(
        query=query,
        sources=set(body.sources or HTTP_DEFAULT_SOURCES),
        content_types=body.content_types,
        kb_space_ids=body.kb_space_ids,
        organization_id=body.organization_id,
        user_id=body.user_id,
        limit=body.limit,
        offset=body.offset,
        min_score=body.min_score,
        include_connectors=body.include_connectors,
        semantic_search=body.semantic_search,
    )
    result = await _run(service, params)
    if body.highlight:
        _add_highlights(result, query)
    return result


@router.get("/search/federated", response_model=FederatedSearchResult, response_model_exclude_none=True)
async def federated_search_get(
    q: str | None = None,
    query: str | None = None,
    sources: str | None = None,
    limit: int = Query(default=settings.search_default_limit, ge=1, le=settings.search_max_limit),
    offset: int = Query(default=0, ge=0),
    semantic: bool = True,
    include_connectors: bool = Query(default=False, alias="includeConnectors"),
    user_id: str | None = Query(default=None, alias="userId"),
    organization_id: uuid.UUID | None = Query(default=None, alias="organizationId"),
    service: FederatedSearchService = Depends(get_search_service),
):
    """Query-string variant of the federated search; results are always highlighted."""
    text = _checked_query(q or query)

    selected = HTTP_DEFAULT_SOURCES
    if sources:
        try:
            selected = [SearchSource(s.strip()) for s in sources.split(",") if s.strip()]
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid source type provided") from exc

    params = FederatedSearchParams(
        query=text,
        sources=set(selected),
        user_id=user_id,
        organization_id=organization_id,
        limit=limit,
        offset=offset,
        min_score=settings.search_default_min_score,
        include_connectors=include_connectors,
        semantic_search=semantic,
    )
    result = await _run(service, params)
    _add_highlights(result, text)
    return result
