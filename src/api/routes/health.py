"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Dict, Any
from fastapi import APIRouter

from config.settings import get_settings
from config.database import get_elasticsearch_client_optional
from product_search.elastic_client import ProductIndexClient
from product_search.errors import SearchBackendError


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    """
    return {
        "status": "healthy",
        "service": "product-search-api",
    }


@router.get("/health/detailed")
def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks:
    - Configuration loaded
    - Elasticsearch reachable
    - Product index present
    """
    settings = get_settings()

    es_status = "unknown"
    es_error = None
    index_exists = None
    client = get_elasticsearch_client_optional()
    if client is None:
        es_status = "not_configured"
    else:
        index_client = ProductIndexClient(es=client, index_name=settings.product_index_name)
        if index_client.ping():
            es_status = "connected"
            try:
                index_exists = index_client.index_exists()
            except SearchBackendError as e:
                es_status = "error"
                es_error = str(e)
        else:
            es_status = "unreachable"

    return {
        "status": "healthy" if es_status == "connected" and index_exists else "degraded",
        "service": "product-search-api",
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "elasticsearch": {
                "status": es_status,
                "error": es_error,
                "index": settings.product_index_name,
                "index_exists": index_exists,
            },
        },
    }


@router.get("/ready")
def readiness_check() -> Dict[str, str]:
    """
    Kubernetes-style readiness probe.

    Ready once the cluster answers a ping.
    """
    client = get_elasticsearch_client_optional()
    if client is None:
        return {"status": "not_ready", "reason": "elasticsearch_not_configured"}
    if not client.ping():
        return {"status": "not_ready", "reason": "elasticsearch_unreachable"}

    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes-style liveness probe.
    """
    return {"status": "alive"}
