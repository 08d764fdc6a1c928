"""
API configuration settings.
"""

from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_API_KEY = "my-secret-api-key"


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Product Catalog API"
    api_version: str = "1.0.0"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False

    # Database Settings
    mongodb_url: str = "mongodb://127.0.0.1:27017"
    mongodb_database: str = "shop"
    mongodb_collection: str = "products"

    # Auth Settings
    auth_enabled: bool = False
    api_key: str = DEFAULT_API_KEY

    # Request handling
    category_required: bool = False
    default_category: str = "general"
    list_response_format: str = "envelope"  # envelope or array
    expose_error_details: bool = False
    serve_landing_page: bool = True

    # CORS Settings
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("api_key")
    @classmethod
    def fallback_api_key(cls, v):
        """An empty API_KEY falls back to the built-in secret."""
        return v or DEFAULT_API_KEY

    @field_validator("list_response_format")
    @classmethod
    def validate_list_response_format(cls, v):
        """Ensure list response format is valid."""
        valid_formats = ["envelope", "array"]
        if v.lower() not in valid_formats:
            raise ValueError(f"list_response_format must be one of: {valid_formats}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    def uses_envelope(self) -> bool:
        """Check if list responses are wrapped in a {count, products} object."""
        return self.list_response_format == "envelope"


# Global config instance
config = APIConfig()
