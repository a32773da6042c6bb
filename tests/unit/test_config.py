"""
Tests for the configuration module.
"""

from unittest.mock import patch

import pytest


class TestSettings:
    """Tests for Settings class."""

    def test_defaults(self):
        """Defaults apply without any environment."""
        from config.settings import DEFAULT_INFERENCE_ENDPOINT_IDS, Settings

        settings = Settings(_env_file=None)

        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.product_index_name == "products"
        assert settings.inference_endpoint_ids == DEFAULT_INFERENCE_ENDPOINT_IDS
        assert settings.max_query_tokens == 20
        assert settings.seed_sample_data is False

    def test_is_development_property(self):
        from config.settings import Settings

        for env in ["development", "dev", "local"]:
            assert Settings(environment=env).is_development is True

        assert Settings(environment="production").is_development is False

    def test_is_production_property(self):
        from config.settings import Settings

        for env in ["production", "prod"]:
            assert Settings(environment=env).is_production is True

        assert Settings(environment="development").is_production is False

    def test_cors_origins_parsing(self):
        """CORS origins can be a comma-separated string."""
        from config.settings import Settings

        settings = Settings(cors_origins="http://localhost:3000, http://localhost:5173")

        assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]

    def test_inference_endpoint_ids_parsing(self):
        from config.settings import Settings

        settings = Settings(inference_endpoint_ids="my-elser, .elser-2-elasticsearch,")

        assert settings.inference_endpoint_ids == ["my-elser", ".elser-2-elasticsearch"]

    def test_elasticsearch_url_trailing_slash_stripped(self):
        from config.settings import Settings

        assert Settings(elasticsearch_url="http://es:9200/").elasticsearch_url == "http://es:9200"

    def test_env_vars_loaded(self):
        from config.settings import Settings

        env = {
            "ELASTICSEARCH_URL": "https://search.internal:9243",
            "PRODUCT_INDEX_NAME": "catalog",
            "INFERENCE_ENDPOINT_IDS": "custom-sparse-v1",
            "SEED_SAMPLE_DATA": "true",
        }
        with patch.dict("os.environ", env):
            settings = Settings(_env_file=None)

        assert settings.elasticsearch_url == "https://search.internal:9243"
        assert settings.product_index_name == "catalog"
        assert settings.inference_endpoint_ids == ["custom-sparse-v1"]
        assert settings.seed_sample_data is True

    def test_max_query_tokens_must_be_positive(self):
        from pydantic import ValidationError
        from config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(max_query_tokens=0)

    def test_max_query_tokens_capped_at_twenty(self):
        from pydantic import ValidationError
        from config.settings import Settings

        assert Settings(max_query_tokens=20).max_query_tokens == 20
        with pytest.raises(ValidationError):
            Settings(max_query_tokens=21)

        with patch.dict("os.environ", {"MAX_QUERY_TOKENS": "50"}):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_settings_for_testing(self):
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(product_index_name="products-test")

        assert settings.environment == "testing"
        assert settings.debug is True
        assert settings.product_index_name == "products-test"


class TestDatabase:
    """Tests for the Elasticsearch client singleton."""

    def test_client_created_with_settings(self):
        from config import database
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(
            elasticsearch_url="http://es.test:9200",
            elasticsearch_username="elastic",
            elasticsearch_password="secret",
        )
        database.get_elasticsearch_client.cache_clear()
        try:
            with patch.object(database, "get_settings", return_value=settings), \
                    patch.object(database, "Elasticsearch") as es_cls:
                client = database.get_elasticsearch_client()
                assert database.get_elasticsearch_client() is client

            es_cls.assert_called_once_with(
                "http://es.test:9200",
                basic_auth=("elastic", "secret"),
                request_timeout=30,
            )
        finally:
            database.get_elasticsearch_client.cache_clear()

    def test_optional_client_returns_none_on_failure(self):
        from config import database

        database.get_elasticsearch_client.cache_clear()
        try:
            with patch.object(database, "Elasticsearch", side_effect=ValueError("bad url")):
                assert database.get_elasticsearch_client_optional() is None
        finally:
            database.get_elasticsearch_client.cache_clear()
