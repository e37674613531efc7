"""
API configuration settings.
"""

from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from store.models import Author


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "BookStore API"
    api_version: str = "1.0.0"
    api_description: str = "REST API for managing books"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Store Settings
    store_backend: str = "mongodb"  # mongodb or memory
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "bookstore"
    books_collection: str = "books"
    authors_collection: str = "authors"
    counters_collection: str = "counters"
    # Authors available to the memory backend, e.g. MEMORY_AUTHORS='[{"id": 1, "first_name": "Frank", "last_name": "Herbert"}]'
    memory_authors: List[Author] = []

    # Localizable body of every 500 response
    error_500_message: str = "Something Went Wrong. Please Try Again Later."

    # CORS Settings
    cors_origins: list = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v):
        """Ensure the store backend is supported."""
        valid_backends = ["mongodb", "memory"]
        if v.lower() not in valid_backends:
            raise ValueError(f"store_backend must be one of: {valid_backends}")
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


# Global config instance
config = APIConfig()
