"""
Product Search Service: semantic, hybrid and scored (explain) search.

Each operation issues exactly one query against the product index:

- semantic: ``semantic`` query over description (ELSER sparse embedding)
- hybrid:   bool.should of the semantic query and a multi_match over
            name^2 and category
- explain:  the semantic query, keeping _score and hits.max_score

Hits without a _source, or whose _source is missing required product fields
(tombstoned or partial documents), are skipped.
"""

import threading
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from core.logging import get_logger
from product_search.elastic_client import ProductIndexClient, get_product_index_client
from product_search.index_config import (
    PRODUCT_INDEX_MAPPINGS,
    hybrid_query,
    product_to_document,
    semantic_query,
)
from product_search.models import Product, ScoredResult

logger = get_logger(__name__)


def _iter_hits(response: Dict[str, Any]) -> Iterator[Tuple[Product, float]]:
    """Yield (product, score) for every hit that carries a complete source document."""
    for hit in response.get("hits", {}).get("hits", []):
        source = hit.get("_source")
        if not source:
            continue
        try:
            product = Product.model_validate(source)
        except ValidationError as e:
            logger.debug("Skipping partial document", doc_id=hit.get("_id"), error_count=e.error_count())
            continue
        yield product, float(hit.get("_score") or 0.0)


class ProductSearchService:
    """
    Search orchestrator over the product index.
    """

    def __init__(self, index_client: Optional[ProductIndexClient] = None):
        self._index = index_client

    @property
    def index(self) -> ProductIndexClient:
        if self._index is None:
            self._index = get_product_index_client()
        return self._index

    # =========================================================================
    # Bootstrap
    # =========================================================================

    def create_index_if_not_exists(self) -> bool:
        """
        Create the product index with the catalog mapping unless it exists.

        Safe to call redundantly.

        Returns:
            True if this call created the index.
        """
        if self.index.index_exists():
            logger.info("Index already exists", index=self.index.index_name)
            return False

        created = self.index.create_index(PRODUCT_INDEX_MAPPINGS)
        if created:
            logger.info("Index created with semantic_text mapping", index=self.index.index_name)
        return created

    def index_product(self, product: Product) -> str:
        """Upsert a product under its id; returns the engine result."""
        result = self.index.upsert_document(product.id, product_to_document(product))
        logger.info("Indexed product", product_id=product.id, name=product.name, result=result)
        return result

    # =========================================================================
    # Search
    # =========================================================================

    def semantic_search(self, query: str) -> List[Product]:
        """Semantic-only search over description, in engine ranking order."""
        response = self.index.search(semantic_query(query))
        products = [product for product, _ in _iter_hits(response)]
        logger.info("Semantic search complete", query=query, results=len(products))
        return products

    def hybrid_search(self, query: str) -> List[Product]:
        """Semantic OR lexical (name^2, category) search, combined ranking."""
        response = self.index.search(hybrid_query(query))
        products = [product for product, _ in _iter_hits(response)]
        logger.info("Hybrid search complete", query=query, results=len(products))
        return products

    def explain_search(self, query: str) -> List[ScoredResult]:
        """
        Semantic search that keeps each hit's score and the response max score.

        max_score is 0 for an empty result list. If the engine omits
        hits.max_score on a non-empty response, the largest hit score is used.
        """
        response = self.index.search(semantic_query(query))
        scored = list(_iter_hits(response))
        if not scored:
            logger.info("Explain search complete", query=query, results=0)
            return []

        max_score = response.get("hits", {}).get("max_score")
        top_hit_score = max(score for _, score in scored)
        max_score = max(float(max_score or 0.0), top_hit_score)

        results = [
            ScoredResult(product=product, score=score, max_score=max_score)
            for product, score in scored
        ]
        logger.info("Explain search complete", query=query, results=len(results), max_score=max_score)
        return results


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[ProductSearchService] = None
_service_lock = threading.Lock()


def get_product_search_service() -> ProductSearchService:
    """Get or create the ProductSearchService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = ProductSearchService()
    return _service
