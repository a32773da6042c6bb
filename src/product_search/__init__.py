"""
Product Search Module: Elasticsearch semantic + lexical search with ELSER explanations.

Provides:
- ProductIndexClient: Index bootstrap, document upsert, query execution
- ProductSearchService: Semantic, hybrid and scored (explain) search
- InferenceClient: Sparse-embedding query tokens with endpoint fallback/discovery
- parse_tokens: Inference response normalization (top weighted tokens)
- ExplanationAssembler: Tokens + scored hits in one SearchExplanation
"""

from product_search.elastic_client import ProductIndexClient, get_product_index_client
from product_search.errors import (
    InferenceTransportError,
    ProductSearchError,
    SearchBackendError,
    SearchCancelledError,
)
from product_search.explanation import ExplanationAssembler, get_explanation_assembler
from product_search.inference_client import InferenceClient, get_inference_client
from product_search.models import Product, ScoredResult, SearchExplanation
from product_search.search_service import ProductSearchService, get_product_search_service
from product_search.token_normalizer import parse_tokens

__all__ = [
    "ProductIndexClient",
    "get_product_index_client",
    "ProductSearchService",
    "get_product_search_service",
    "InferenceClient",
    "get_inference_client",
    "ExplanationAssembler",
    "get_explanation_assembler",
    "parse_tokens",
    "Product",
    "ScoredResult",
    "SearchExplanation",
    "ProductSearchError",
    "SearchBackendError",
    "SearchCancelledError",
    "InferenceTransportError",
]
