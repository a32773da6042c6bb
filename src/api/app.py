"""
FastAPI Application Factory.

Usage:
    # Development
    PYTHONPATH=src uvicorn api.app:create_app --factory --reload

    # Production
    PYTHONPATH=src uvicorn api.app:app --host 0.0.0.0 --port 8080 --workers 4
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Runs on startup:
    - Initialize logging
    - Optionally create the product index and load the sample catalog

    Clients (Elasticsearch, inference session) are created lazily on the
    first request.
    """
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting product search API",
        environment=settings.environment,
        port=settings.port,
        elasticsearch_url=settings.elasticsearch_url,
        index=settings.product_index_name,
    )

    if settings.seed_sample_data:
        from product_search.errors import ProductSearchError
        from product_search.search_service import get_product_search_service
        from product_search.seed import seed_sample_catalog
        try:
            seed_sample_catalog(get_product_search_service())
        except ProductSearchError as e:
            logger.warning("Sample catalog seeding failed", error=str(e))

    yield

    logger.info("Shutting down product search API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Product Search API",
        description="""
        Product catalog search on Elasticsearch with ELSER sparse embeddings.

        ## Main Endpoints

        - `/api/search?q=` - Semantic search over descriptions
        - `/api/search/hybrid?q=` - Semantic + lexical (name^2, category)
        - `/api/search/explain?q=` - Query tokens + scored results

        ## Health Checks

        - `/health`, `/health/detailed`, `/ready`, `/live`
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestTracingMiddleware)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.search import router as search_router
    app.include_router(search_router)

    return app


# Default app instance for uvicorn: `uvicorn api.app:app`
app = create_app()
