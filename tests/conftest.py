"""
Pytest configuration and shared fixtures for the product search tests.
"""
import json
import os
import sys
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

@pytest.fixture
def sample_product_dict() -> dict:
    """Sample product document as stored in the index (_source)."""
    return {
        "id": "1",
        "name": "Running Shoes Pro",
        "description": "Lightweight breathable running shoes with cushioned sole for marathon "
                       "training and daily jogging on pavement or trail",
        "category": "Footwear",
        "price": 129.99,
        "image_url": "https://example.com/images/shoes.jpg",
    }


@pytest.fixture
def sample_product_dicts(sample_product_dict: dict) -> List[dict]:
    """Five product documents with distinct ids."""
    docs = []
    for i in range(5):
        doc = sample_product_dict.copy()
        doc["id"] = f"sku-{i:03d}"
        doc["name"] = f"Test Item {i}"
        docs.append(doc)
    return docs


def make_hit(source: Optional[dict], score: Optional[float] = 1.0) -> Dict[str, Any]:
    """One entry of hits.hits; source=None models a partial document."""
    hit: Dict[str, Any] = {"_index": "products", "_id": (source or {}).get("id", "missing"), "_score": score}
    if source is not None:
        hit["_source"] = source
    return hit


def make_search_response(hits: List[Dict[str, Any]], max_score: Optional[float] = None) -> Dict[str, Any]:
    """Elasticsearch search response body."""
    return {
        "took": 3,
        "timed_out": False,
        "hits": {
            "total": {"value": len(hits), "relation": "eq"},
            "max_score": max_score,
            "hits": hits,
        },
    }


def make_http_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """requests.Response stand-in with status_code, content and json()."""
    resp = MagicMock()
    resp.status_code = status_code
    if body is None:
        resp.content = b""
        resp.json.side_effect = ValueError("No JSON body")
    else:
        resp.content = json.dumps(body).encode("utf-8")
        resp.json.return_value = body
    return resp


# ============================================================================
# Fixtures: Mock Services
# ============================================================================

@pytest.fixture
def mock_es():
    """Mock Elasticsearch client for unit tests."""
    es = MagicMock()
    es.indices.exists.return_value = True
    es.index.return_value = {"_id": "1", "result": "created"}
    es.search.return_value = make_search_response([])
    es.ping.return_value = True
    return es


@pytest.fixture
def index_client(mock_es):
    """ProductIndexClient bound to the mock Elasticsearch client."""
    from product_search.elastic_client import ProductIndexClient
    return ProductIndexClient(es=mock_es, index_name="products")


@pytest.fixture
def search_service(index_client):
    """ProductSearchService over the mocked index."""
    from product_search.search_service import ProductSearchService
    return ProductSearchService(index_client=index_client)


@pytest.fixture
def mock_session():
    """Mock requests.Session for the inference transport."""
    return MagicMock()


@pytest.fixture
def inference_client(mock_session):
    """InferenceClient with the default ELSER ids and a mocked session."""
    from product_search.inference_client import InferenceClient
    return InferenceClient(
        base_url="http://es.test:9200",
        endpoint_ids=[".elser-2-elasticsearch", ".elser_model_2_linux-x86_64"],
        timeout_seconds=2.0,
        session=mock_session,
    )


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow")


# ============================================================================
# Skip conditions
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Auto-skip integration tests if no Elasticsearch cluster is configured."""
    skip_integration = pytest.mark.skip(reason="Integration tests require ELASTICSEARCH_TEST_URL")

    es_url = os.getenv("ELASTICSEARCH_TEST_URL")

    for item in items:
        if "integration" in item.keywords and not es_url:
            item.add_marker(skip_integration)
