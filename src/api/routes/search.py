"""
Search API Routes.

Three read endpoints keyed by a single free-text ``q`` parameter:

- GET /api/search          semantic search -> List[Product]
- GET /api/search/hybrid   semantic OR lexical -> List[Product]
- GET /api/search/explain  query tokens + scored hits -> SearchExplanation

NOTE: The semantic and hybrid routes use `def` (not `async def`) because the
Elasticsearch client and requests are synchronous; FastAPI runs them in a
thread pool. The explain route is `async def` so it can watch for a client
disconnect while the assembler runs in a worker thread, and cancel the
remaining inference attempts.
"""

import asyncio
import threading
from typing import Any, Callable, List, TypeVar

from fastapi import APIRouter, HTTPException, Query, Request

from core.logging import get_logger
from product_search.errors import SearchBackendError, SearchCancelledError
from product_search.explanation import get_explanation_assembler
from product_search.models import Product, SearchExplanation
from product_search.search_service import get_product_search_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/search", tags=["Search"])

T = TypeVar("T")

# Client closed request (nginx convention)
STATUS_CLIENT_CLOSED_REQUEST = 499

DISCONNECT_POLL_SECONDS = 0.1


def _run(operation: Callable[..., T], *args: Any) -> T:
    """Run a search operation, mapping core failures to HTTP errors."""
    try:
        return operation(*args)
    except SearchCancelledError as e:
        logger.info("Search cancelled", reason=str(e))
        raise HTTPException(status_code=STATUS_CLIENT_CLOSED_REQUEST, detail=str(e))
    except SearchBackendError as e:
        logger.error("Search backend failure", error=str(e), status_code=e.status_code)
        raise HTTPException(status_code=502, detail=f"Search backend unavailable: {e}")


async def watch_disconnect(
    request: Request,
    cancel_event: threading.Event,
    poll_seconds: float = DISCONNECT_POLL_SECONDS,
) -> None:
    """Set ``cancel_event`` once the client has gone away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling search")
            cancel_event.set()
            return
        await asyncio.sleep(poll_seconds)


@router.get(
    "",
    response_model=List[Product],
    summary="Semantic search over product descriptions",
)
def semantic_search(
    q: str = Query(..., min_length=1, max_length=500, description="Free-text search query"),
) -> List[Product]:
    """Products ranked by semantic similarity of their description to `q`."""
    return _run(get_product_search_service().semantic_search, q)


@router.get(
    "/hybrid",
    response_model=List[Product],
    summary="Hybrid search (semantic + lexical)",
)
def hybrid_search(
    q: str = Query(..., min_length=1, max_length=500, description="Free-text search query"),
) -> List[Product]:
    """
    Semantic description match OR lexical match on name (boosted 2x) and category.
    """
    return _run(get_product_search_service().hybrid_search, q)


@router.get(
    "/explain",
    response_model=SearchExplanation,
    summary="Explain search (ELSER query tokens + scored results)",
)
async def explain_search(
    request: Request,
    q: str = Query(..., min_length=1, max_length=500, description="Free-text search query"),
) -> SearchExplanation:
    """
    Semantic search with per-hit `score`, response `maxScore`, and the top
    weighted query tokens from sparse-embedding inference.

    `queryTokens` is empty when no inference endpoint is available. If the
    client disconnects mid-request the pending work is cancelled (499).
    """
    assembler = get_explanation_assembler()
    cancel_event = threading.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancel_event))
    try:
        return await asyncio.to_thread(_run, assembler.explain, q, cancel_event)
    finally:
        watcher.cancel()
