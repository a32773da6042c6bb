"""
Sparse-embedding inference client (Elasticsearch _inference API).

Query tokens come from whichever ELSER endpoint the cluster exposes. The
lookup is a two-tier strategy:

1. The fixed endpoint ids from settings, in order.
2. One endpoint discovered via GET /_inference/sparse_embedding (first listed).

Candidates are produced lazily and tried one at a time by the same
attempt-and-check loop; the first HTTP 200 wins. When nothing answers the
client returns an empty token map, which callers treat as "no inference
configured".
"""

import threading
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

import requests

from config.settings import get_settings
from core.logging import get_logger
from product_search.errors import InferenceTransportError, raise_if_cancelled
from product_search.token_normalizer import parse_tokens

logger = get_logger(__name__)

INFERENCE_PATH = "/_inference/sparse_embedding"

# Misconfiguration, not endpoint unavailability: retrying another id cannot help.
_FATAL_TRANSPORT_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)


def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    raise_if_cancelled(cancel_event, "Inference request cancelled by caller")


class InferenceClient:
    """
    Fetches weighted query tokens from a sparse-embedding inference endpoint.

    Stateless between calls apart from the pooled requests.Session, so one
    instance is shared by all requests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        endpoint_ids: Optional[List[str]] = None,
        timeout_seconds: Optional[float] = None,
        max_tokens: Optional[int] = None,
        session: Optional[requests.Session] = None,
        auth: Optional[Tuple[str, str]] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.elasticsearch_url).rstrip("/")
        self.endpoint_ids = list(
            endpoint_ids if endpoint_ids is not None else settings.inference_endpoint_ids
        )
        self.timeout_seconds = timeout_seconds or settings.inference_request_timeout_seconds
        self.max_tokens = max_tokens or settings.max_query_tokens

        self._session = session or requests.Session()
        if auth is None and settings.elasticsearch_username and settings.elasticsearch_password:
            auth = (settings.elasticsearch_username, settings.elasticsearch_password)
        if auth is not None:
            self._session.auth = auth

    def close(self):
        """Close the underlying HTTP session."""
        self._session.close()

    # =========================================================================
    # URLs
    # =========================================================================

    @property
    def listing_url(self) -> str:
        return f"{self.base_url}{INFERENCE_PATH}"

    def endpoint_url(self, inference_id: str) -> str:
        return f"{self.listing_url}/{quote(inference_id, safe='')}"

    # =========================================================================
    # Token Fetch
    # =========================================================================

    def fetch_tokens(
        self,
        query: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, float]:
        """
        Return the top weighted tokens the inference endpoint produces for ``query``.

        Args:
            query: Free-text search query.
            cancel_event: Set by the caller to abandon the lookup.

        Returns:
            Ordered token -> weight map (possibly empty).

        Raises:
            SearchCancelledError: ``cancel_event`` was set.
            InferenceTransportError: The inference base URL is unusable.
        """
        payload = {"input": [query]}

        for inference_id in self._candidate_ids(cancel_event):
            tokens = self._attempt(inference_id, payload, cancel_event)
            if tokens is not None:
                logger.debug(
                    "Inference tokens fetched",
                    inference_id=inference_id,
                    token_count=len(tokens),
                )
                return tokens

        logger.warning("No sparse-embedding inference endpoint found, returning empty tokens")
        return {}

    def _candidate_ids(self, cancel_event: Optional[threading.Event]) -> Iterator[str]:
        """Fixed ids first; discovery only runs once they are exhausted."""
        yield from self.endpoint_ids
        discovered = self.discover_endpoint(cancel_event)
        if discovered:
            yield discovered

    def _attempt(
        self,
        inference_id: str,
        payload: Dict[str, Any],
        cancel_event: Optional[threading.Event],
    ) -> Optional[Dict[str, float]]:
        """POST to one endpoint; parsed tokens on 200, None otherwise."""
        _raise_if_cancelled(cancel_event)
        url = self.endpoint_url(inference_id)
        try:
            resp = self._session.post(url, json=payload, timeout=self.timeout_seconds)
        except _FATAL_TRANSPORT_ERRORS as e:
            raise InferenceTransportError(f"Invalid inference URL {url}: {e}") from e
        except requests.RequestException as e:
            logger.debug("Inference endpoint not available", endpoint=url, error=str(e))
            return None

        if resp.status_code != 200:
            logger.debug("Inference endpoint not available", endpoint=url, status_code=resp.status_code)
            return None
        return parse_tokens(resp.content, limit=self.max_tokens)

    # =========================================================================
    # Discovery
    # =========================================================================

    def discover_endpoint(self, cancel_event: Optional[threading.Event] = None) -> Optional[str]:
        """
        List registered sparse-embedding endpoints and return the first id.

        The listing is either a bare array of descriptors or an object with an
        ``endpoints`` array; each descriptor carries ``inference_id``.
        """
        _raise_if_cancelled(cancel_event)
        try:
            resp = self._session.get(self.listing_url, timeout=self.timeout_seconds)
        except _FATAL_TRANSPORT_ERRORS as e:
            raise InferenceTransportError(f"Invalid inference URL {self.listing_url}: {e}") from e
        except requests.RequestException as e:
            logger.warning("Could not discover inference endpoints", error=str(e))
            return None

        if resp.status_code != 200:
            logger.warning("Could not discover inference endpoints", status_code=resp.status_code)
            return None

        try:
            listing = resp.json()
        except ValueError as e:
            logger.warning("Inference endpoint listing is not JSON", error=str(e))
            return None

        endpoints = listing.get("endpoints") if isinstance(listing, dict) else listing
        if not isinstance(endpoints, list) or not endpoints:
            return None

        first = endpoints[0]
        inference_id = first.get("inference_id") if isinstance(first, dict) else None
        if not isinstance(inference_id, str) or not inference_id:
            return None

        logger.info("Discovered inference endpoint", inference_id=inference_id)
        return inference_id


# =============================================================================
# Singleton
# =============================================================================

_inference_client: Optional[InferenceClient] = None
_inference_lock = threading.Lock()


def get_inference_client() -> InferenceClient:
    """Get or create the InferenceClient singleton (thread-safe)."""
    global _inference_client
    if _inference_client is None:
        with _inference_lock:
            if _inference_client is None:
                _inference_client = InferenceClient()
    return _inference_client
