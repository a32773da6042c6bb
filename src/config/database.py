"""
Elasticsearch client singletons.

This module provides a singleton Elasticsearch connection so the
transport pool is shared across requests.
"""

from functools import lru_cache
from typing import Optional

from elasticsearch import Elasticsearch

from config.settings import get_settings


class ElasticsearchClientError(Exception):
    """Raised when the Elasticsearch client cannot be created."""
    pass


@lru_cache(maxsize=1)
def get_elasticsearch_client() -> Elasticsearch:
    """
    Get the singleton Elasticsearch client instance.

    Uses lru_cache to ensure only one client is created and reused.

    Returns:
        Elasticsearch: The shared client instance

    Raises:
        ElasticsearchClientError: If client cannot be created
    """
    try:
        settings = get_settings()
        basic_auth = None
        if settings.elasticsearch_username and settings.elasticsearch_password:
            basic_auth = (settings.elasticsearch_username, settings.elasticsearch_password)
        return Elasticsearch(
            settings.elasticsearch_url,
            basic_auth=basic_auth,
            request_timeout=settings.elasticsearch_request_timeout_seconds,
        )
    except Exception as e:
        raise ElasticsearchClientError(f"Failed to create Elasticsearch client: {e}") from e


def get_elasticsearch_client_optional() -> Optional[Elasticsearch]:
    """
    Get the Elasticsearch client, returning None if it cannot be created.

    Useful for graceful degradation in health checks.
    """
    try:
        return get_elasticsearch_client()
    except ElasticsearchClientError:
        return None
