"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

A single global configuration instance is shared through the application
lifecycle (see ``get_settings``).

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Computed properties for derived values

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Storage Keys:
------------
The catalog and the cart are persisted as two JSON documents in the
key/value table. Their keys are configurable but must differ.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy connection string for the key/value store
        sql_echo: Log every SQL statement
        authoritative_catalog: Path or http(s) URL of the bundled catalog
        snapshot_timeout_seconds: Timeout for fetching a remote catalog
        refresh_on_startup: Reconcile against the bundled catalog at startup
        catalog_storage_key: Persistence key of the product catalog
        cart_storage_key: Persistence key of the cart
        export_basename: File name (without extension) of exported inventories
        max_import_bytes: Largest accepted import upload
        openai_api_key: API key for product suggestions (optional)
        suggestion_model: Chat model used for product suggestions
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> print(settings.catalog_storage_key)
        'cafe_productos'
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="CaféGestor POS API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # PERSISTENCE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/cafegestor.db",
        description="SQLAlchemy database connection string"
    )

    sql_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )

    catalog_storage_key: str = Field(
        default="cafe_productos",
        min_length=1,
        description="Persistence key of the product catalog"
    )

    cart_storage_key: str = Field(
        default="cafe_carrito",
        min_length=1,
        description="Persistence key of the cart"
    )

    # =========================================================================
    # CATALOG SETTINGS
    # =========================================================================
    authoritative_catalog: str = Field(
        default="data/productos.json",
        description="Path or URL of the authoritative product catalog"
    )

    snapshot_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for fetching a remote catalog"
    )

    refresh_on_startup: bool = Field(
        default=True,
        description="Reconcile with the authoritative catalog at startup"
    )

    # =========================================================================
    # IMPORT / EXPORT SETTINGS
    # =========================================================================
    export_basename: str = Field(
        default="inventario_cafeteria",
        description="Base file name for exported inventories"
    )

    max_import_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Maximum size of an uploaded inventory file"
    )

    # =========================================================================
    # SUGGESTION SETTINGS
    # =========================================================================
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the product suggestion helper"
    )

    suggestion_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used to suggest product data"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("export_basename")
    @classmethod
    def validate_export_basename(cls, value: str) -> str:
        """Reject blank names and names carrying a path or extension."""
        value = value.strip()
        if not value:
            raise ValueError("export_basename cannot be empty")
        if "/" in value or "\\" in value or "." in value:
            raise ValueError(
                f"export_basename must be a bare file name, got {value!r}"
            )
        return value

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_api_key(cls, value: Optional[str]) -> Optional[str]:
        """Treat blank and 'undefined' keys as not configured."""
        if value is None:
            return None
        value = value.strip()
        if not value or value == "undefined":
            return None
        return value

    @model_validator(mode="after")
    def validate_storage_keys(self) -> "Settings":
        """Catalog and cart must not share a persistence key."""
        if self.catalog_storage_key == self.cart_storage_key:
            raise ValueError(
                "catalog_storage_key and cart_storage_key must differ"
            )
        return self

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def snapshot_is_remote(self) -> bool:
        """True when the authoritative catalog is fetched over HTTP."""
        return self.authoritative_catalog.lower().startswith(("http://", "https://"))

    @property
    def suggestions_enabled(self) -> bool:
        """True when an API key for the suggestion helper is configured."""
        return self.openai_api_key is not None

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def is_in_memory_database(self) -> bool:
        """Check whether the database URL points to an in-memory SQLite."""
        url = self.database_url
        return url in ("sqlite://", "sqlite:///:memory:")

    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for non-file databases
        """
        if self.database_url.startswith("sqlite") and not self.is_in_memory_database():
            db_path = self.database_url.replace("sqlite:///", "")
            if db_path.startswith("./"):
                db_path = db_path[2:]
            return Path(db_path)
        return None

    def ensure_directories(self) -> None:
        """Create the SQLite database directory when one is configured."""
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Uses lru_cache so only one Settings instance is created
    throughout the application lifecycle.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
