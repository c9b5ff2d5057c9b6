"""FastAPI dependency injection."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from fedsearch.search.orchestrator import FederatedSearchService


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def get_search_service(request: Request) -> FederatedSearchService:
    service: FederatedSearchService = request.app.state.search_service
    return service
