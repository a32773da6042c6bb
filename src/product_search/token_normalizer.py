"""
Sparse-embedding response normalizer.

The _inference API has returned the token map at different locations across
releases. Each location is a probe: a pure function that returns the token
object or None. Probes run in priority order and the first hit wins:

1. {"sparse_embedding": [{"embedding": {token: weight}}]}
2. {"sparse_embedding": [{token: weight}]}
3. {"results": [{"sparse_embedding": {token: weight}}]}

Whatever the shape, the result is sorted by weight (descending, ties keep
response order) and cut to the top ``limit`` tokens. An unrecognised or
undecodable body means "no tokens", never an error.
"""

import json
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

from core.logging import get_logger

logger = get_logger(__name__)

MAX_QUERY_TOKENS = 20

TokenProbe = Callable[[Any], Optional[Dict[str, Any]]]


def _first(node: Any, key: str) -> Any:
    """Return node[key][0] or None."""
    if not isinstance(node, dict):
        return None
    items = node.get(key)
    if isinstance(items, list) and items:
        return items[0]
    return None


def _probe_embedding_object(root: Any) -> Optional[Dict[str, Any]]:
    first = _first(root, "sparse_embedding")
    if isinstance(first, dict) and isinstance(first.get("embedding"), dict):
        return first["embedding"]
    return None


def _probe_plain_map(root: Any) -> Optional[Dict[str, Any]]:
    first = _first(root, "sparse_embedding")
    if isinstance(first, dict):
        return first
    return None


def _probe_legacy_results(root: Any) -> Optional[Dict[str, Any]]:
    first = _first(root, "results")
    if isinstance(first, dict) and isinstance(first.get("sparse_embedding"), dict):
        return first["sparse_embedding"]
    return None


TOKEN_PROBES: Tuple[TokenProbe, ...] = (
    _probe_embedding_object,
    _probe_plain_map,
    _probe_legacy_results,
)


def top_tokens(tokens: Dict[str, Any], limit: int = MAX_QUERY_TOKENS) -> Dict[str, float]:
    """
    Keep numeric weights, sort descending (stable) and truncate to ``limit``.
    """
    weights = []
    for token, weight in tokens.items():
        # bool is an int subclass but never a weight
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            continue
        weights.append((token, float(weight)))

    weights.sort(key=lambda item: item[1], reverse=True)
    return dict(weights[:limit])


def parse_tokens(
    raw_body: Union[bytes, str],
    limit: int = MAX_QUERY_TOKENS,
    probes: Sequence[TokenProbe] = TOKEN_PROBES,
) -> Dict[str, float]:
    """
    Parse an inference response body into a weighted token map.

    Args:
        raw_body: Response body as returned by the transport.
        limit: Maximum number of tokens to keep.
        probes: Ordered shape probes (defaults to TOKEN_PROBES).

    Returns:
        Ordered dict of token -> weight, heaviest first; empty when the
        shape is not recognised.
    """
    try:
        root = json.loads(raw_body)
    except (TypeError, ValueError) as e:
        logger.warning("Inference response is not JSON", error=str(e))
        return {}

    for probe in probes:
        tokens = probe(root)
        if tokens is not None:
            return top_tokens(tokens, limit)

    logger.warning("Could not locate sparse embedding in inference response")
    return {}
