"""
Explain Search: query tokens + scored semantic hits.

Token inference and the scored search do not depend on each other, so they
run in parallel and are joined before the explanation is built. The token
side is auxiliary: when it fails the explanation still comes back with an
empty token map. A failed search or a cancellation fails the whole call.
"""

import contextvars
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from core.logging import get_logger
from product_search.errors import SearchCancelledError, raise_if_cancelled
from product_search.inference_client import InferenceClient, get_inference_client
from product_search.models import ScoredResult, SearchExplanation
from product_search.search_service import ProductSearchService, get_product_search_service

logger = get_logger(__name__)


class ExplanationAssembler:
    """Combines InferenceClient tokens with ProductSearchService scored hits."""

    def __init__(
        self,
        search_service: Optional[ProductSearchService] = None,
        inference_client: Optional[InferenceClient] = None,
    ):
        self._search = search_service
        self._inference = inference_client

    @property
    def search_service(self) -> ProductSearchService:
        if self._search is None:
            self._search = get_product_search_service()
        return self._search

    @property
    def inference(self) -> InferenceClient:
        if self._inference is None:
            self._inference = get_inference_client()
        return self._inference

    def explain(
        self,
        query: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchExplanation:
        """
        Build the SearchExplanation for ``query``.

        Raises:
            SearchCancelledError: ``cancel_event`` was set before the token
                lookup or the scored search ran.
            SearchBackendError: The scored search failed.
        """
        # Workers inherit the bound log context (request_id). One copy per
        # worker: a Context cannot be entered by two threads at once.
        with ThreadPoolExecutor(max_workers=2) as executor:
            future_tokens = executor.submit(
                contextvars.copy_context().run, self.inference.fetch_tokens, query, cancel_event,
            )
            future_results = executor.submit(
                contextvars.copy_context().run, self._scored_results, query, cancel_event,
            )

            # Join the search first so its failure wins over a token failure
            results = future_results.result()
            query_tokens = self._tokens_or_empty(future_tokens.result, query)

        logger.info(
            "Explain search assembled",
            query=query,
            token_count=len(query_tokens),
            results=len(results),
        )
        return SearchExplanation(query=query, query_tokens=query_tokens, results=results)

    def _scored_results(
        self,
        query: str,
        cancel_event: Optional[threading.Event],
    ) -> List[ScoredResult]:
        raise_if_cancelled(cancel_event, "Explain search cancelled by caller")
        return self.search_service.explain_search(query)

    @staticmethod
    def _tokens_or_empty(get_tokens, query: str) -> Dict[str, float]:
        try:
            return get_tokens()
        except SearchCancelledError:
            raise
        except Exception as e:
            logger.warning(
                "Token inference failed, explaining without tokens",
                query=query,
                error=str(e),
                error_type=type(e).__name__,
            )
            return {}


# =============================================================================
# Singleton
# =============================================================================

_assembler: Optional[ExplanationAssembler] = None
_assembler_lock = threading.Lock()


def get_explanation_assembler() -> ExplanationAssembler:
    """Get or create the ExplanationAssembler singleton (thread-safe)."""
    global _assembler
    if _assembler is None:
        with _assembler_lock:
            if _assembler is None:
                _assembler = ExplanationAssembler()
    return _assembler
