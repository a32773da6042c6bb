"""
Elasticsearch Product Index Client.

Thin wrapper around the official ``elasticsearch`` client (8.x) covering the
four operations the search core needs:

- indices.exists(index=...)
- indices.create(index=..., mappings=...)
- index(index=..., id=..., document=...)
- search(index=..., query=...)

Responses are ObjectApiResponse objects; ``.body`` gives the plain dict.
Transport and API failures are re-raised as SearchBackendError.
"""

import threading
from typing import Any, Dict, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError

from config.database import get_elasticsearch_client
from config.settings import get_settings
from core.logging import get_logger
from product_search.errors import SearchBackendError
from product_search.index_config import PRODUCT_INDEX_MAPPINGS

logger = get_logger(__name__)


def _body(resp: Any) -> Dict[str, Any]:
    return getattr(resp, "body", resp)


class ProductIndexClient:
    """
    Wrapper around a shared Elasticsearch client for the product index.

    The underlying client is thread-safe; one instance serves all requests.
    """

    def __init__(
        self,
        es: Optional[Elasticsearch] = None,
        index_name: Optional[str] = None,
    ):
        self._es = es
        self.index_name = index_name or get_settings().product_index_name

    @property
    def es(self) -> Elasticsearch:
        if self._es is None:
            self._es = get_elasticsearch_client()
        return self._es

    # =========================================================================
    # Index Management
    # =========================================================================

    def index_exists(self) -> bool:
        """Check if the product index exists."""
        try:
            return bool(self.es.indices.exists(index=self.index_name))
        except (ApiError, TransportError) as e:
            raise SearchBackendError(f"Index existence check failed: {e}") from e

    def create_index(self, mappings: Optional[Dict[str, Any]] = None) -> bool:
        """
        Create the product index with the given (default: catalog) mapping.

        Returns:
            True if the index was created, False if another caller created it
            first (resource_already_exists_exception).
        """
        try:
            self.es.indices.create(
                index=self.index_name,
                mappings=mappings or PRODUCT_INDEX_MAPPINGS,
            )
        except ApiError as e:
            if "resource_already_exists_exception" in str(e):
                logger.info("Index created concurrently, skipping", index=self.index_name)
                return False
            raise SearchBackendError(
                f"Index creation failed: {e}", status_code=getattr(e, "status_code", None),
            ) from e
        except TransportError as e:
            raise SearchBackendError(f"Index creation failed: {e}") from e
        return True

    # =========================================================================
    # Document Operations
    # =========================================================================

    def upsert_document(self, doc_id: str, document: Dict[str, Any]) -> str:
        """
        Index (create or replace) a document under ``doc_id``.

        Returns:
            The engine's result string ("created" or "updated").
        """
        try:
            resp = self.es.index(index=self.index_name, id=doc_id, document=document)
        except ApiError as e:
            raise SearchBackendError(
                f"Indexing document {doc_id} failed: {e}",
                status_code=getattr(e, "status_code", None),
            ) from e
        except TransportError as e:
            raise SearchBackendError(f"Indexing document {doc_id} failed: {e}") from e
        return _body(resp).get("result", "")

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, query: Dict[str, Any], size: Optional[int] = None) -> Dict[str, Any]:
        """
        Run a query against the product index.

        Args:
            query: Query DSL body (the value of the top-level "query" key).
            size: Optional hit count; engine default (10) when None.

        Returns:
            Response dict with ``hits.hits`` (each with ``_source``/``_score``)
            and ``hits.max_score``.
        """
        params: Dict[str, Any] = {"index": self.index_name, "query": query}
        if size is not None:
            params["size"] = size
        try:
            resp = self.es.search(**params)
        except ApiError as e:
            raise SearchBackendError(
                f"Search failed: {e}", status_code=getattr(e, "status_code", None),
            ) from e
        except TransportError as e:
            raise SearchBackendError(f"Search failed: {e}") from e
        return _body(resp)

    def ping(self) -> bool:
        """Return True when the cluster answers."""
        try:
            return bool(self.es.ping())
        except TransportError:
            return False


# =============================================================================
# Singleton
# =============================================================================

_index_client: Optional[ProductIndexClient] = None
_index_client_lock = threading.Lock()


def get_product_index_client() -> ProductIndexClient:
    """Get or create the ProductIndexClient singleton (thread-safe)."""
    global _index_client
    if _index_client is None:
        with _index_client_lock:
            if _index_client is None:
                _index_client = ProductIndexClient()
    return _index_client
