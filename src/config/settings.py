"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_INFERENCE_ENDPOINT_IDS = [
    ".elser-2-elasticsearch",
    ".elser_model_2_linux-x86_64",
]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Optional environment variables:
        - ELASTICSEARCH_URL: Elasticsearch base URL (default: http://localhost:9200)
        - PRODUCT_INDEX_NAME: Index holding the catalog (default: products)
        - INFERENCE_ENDPOINT_IDS: Comma-separated sparse-embedding endpoint ids
        - HOST / PORT: Server bind address
        - ENVIRONMENT: Environment name (development, staging, production)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Elasticsearch Configuration
    # ==========================================================================
    elasticsearch_url: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch base URL (also used for the _inference API)"
    )
    elasticsearch_username: str = Field(default="", description="Basic auth user (optional)")
    elasticsearch_password: str = Field(default="", description="Basic auth password (optional)")
    elasticsearch_request_timeout_seconds: int = Field(
        default=30,
        description="Timeout for index/search requests (seconds)"
    )
    product_index_name: str = Field(default="products", description="Product catalog index name")

    @field_validator("elasticsearch_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ==========================================================================
    # Sparse-embedding Inference
    # ==========================================================================
    inference_endpoint_ids: List[str] = Field(
        default=list(DEFAULT_INFERENCE_ENDPOINT_IDS),
        description="Fixed inference endpoint ids, tried in order before discovery"
    )
    inference_request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for each inference/discovery HTTP call (seconds)"
    )
    max_query_tokens: int = Field(
        default=20,
        ge=1,
        le=20,
        description="Maximum number of query tokens returned by explain search"
    )

    @field_validator("inference_endpoint_ids", mode="before")
    @classmethod
    def parse_inference_endpoint_ids(cls, v):
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    # ==========================================================================
    # Bootstrap
    # ==========================================================================
    seed_sample_data: bool = Field(
        default=False,
        description="Create the index and load the sample catalog on startup"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(**test_defaults)
