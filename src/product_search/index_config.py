"""
Product Index Configuration.

Defines the Elasticsearch field mapping, the query bodies issued by the
search service, and the product-to-document mapping.

Only fields mapped as ``semantic_text`` take part in ``semantic`` queries,
so ``description`` is the single semantically-embedded field.
"""

from typing import Any, Dict

from product_search.models import Product


# ============================================================================
# Index Mapping
# ============================================================================

SEMANTIC_FIELD = "description"

# Lexical branch of hybrid search: title matches weigh double.
LEXICAL_FIELDS = ["name^2", "category"]

PRODUCT_INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        "id": {"type": "keyword"},
        "name": {"type": "text"},
        "description": {"type": "semantic_text"},
        "category": {"type": "keyword"},
        "price": {"type": "double"},
        "image_url": {"type": "keyword"},
    }
}


# ============================================================================
# Query Bodies
# ============================================================================

def semantic_query(query: str) -> Dict[str, Any]:
    """Semantic query over the embedded description field."""
    return {"semantic": {"field": SEMANTIC_FIELD, "query": query}}


def lexical_query(query: str) -> Dict[str, Any]:
    """Multi-field lexical query over name (boosted) and category."""
    return {"multi_match": {"query": query, "fields": list(LEXICAL_FIELDS)}}


def hybrid_query(query: str) -> Dict[str, Any]:
    """
    Logical OR of the semantic and lexical branches.

    The semantic branch catches paraphrases; the lexical branch rewards
    exact or fuzzy title and category matches.
    """
    return {
        "bool": {
            "should": [
                semantic_query(query),
                lexical_query(query),
            ]
        }
    }


# ============================================================================
# Document Mapping
# ============================================================================

def product_to_document(product: Product) -> Dict[str, Any]:
    """Convert a Product to the document stored under its id."""
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "price": product.price,
        "image_url": product.image_url,
    }
