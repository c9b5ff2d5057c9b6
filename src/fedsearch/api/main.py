"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from fedsearch.api.deps import get_db
from fedsearch.api.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from fedsearch.api.routes import search
from fedsearch.common.config import settings
from fedsearch.common.database import create_engine, create_session_factory
from fedsearch.common.logging import EmbeddingUsageTracker, configure_logging
from fedsearch.embedders.openai_embedder import OpenAIEmbedder
from fedsearch.search.orchestrator import build_search_service

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings.log_level)

    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    app.state.db_engine = engine
    app.state.session_factory = session_factory

    embedder = None
    if settings.openai_api_key:
        embedder = OpenAIEmbedder(
            api_key=settings.openai_api_key,
            model=settings.embedding_model,
            dims=settings.embedding_dims,
            max_chars=settings.embedding_max_chars,
            usage_tracker=EmbeddingUsageTracker(),
        )
    else:
        logger.warning("embedder_disabled", detail="OPENAI_API_KEY not set; semantic search is keyword-only")
    app.state.embedder = embedder

    app.state.search_service = build_search_service(session_factory, embedder=embedder, config=settings)

    if settings.connector_live_search:
        # No live connector implementations are registered in this service
        logger.warning("connector_live_search_unavailable")

    yield

    # Shutdown
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Federated Search API",
        description="Unified search across intranet knowledge sources",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware (last added is outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(search.router, prefix="/api", tags=["search"])

    @app.get("/api/health")
    async def health(db: AsyncSession = Depends(get_db)):
        try:
            await db.execute(text("SELECT 1"))
            postgres = "up"
        except Exception:
            logger.warning("health_check_pg_failed", exc_info=True)
            postgres = "down"

        healthy = postgres == "up"
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={"status": "healthy" if healthy else "unhealthy", "services": {"postgres": postgres}},
        )

    return app


app = create_app()
