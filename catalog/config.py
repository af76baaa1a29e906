"""
Configuration and settings for the recipe catalog.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the catalog store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Document store (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(
        default=None, validation_alias="DATABASE_URL"
    )

    # Partition layout
    partition_prefix: str = Field(
        default="recipe_", validation_alias="RECIPE_PARTITION_PREFIX"
    )
    default_category: str = Field(
        default="uncategorized", validation_alias="RECIPE_DEFAULT_CATEGORY"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="CATALOG_USE_IN_MEMORY_BACKENDS"
    )

    service_name: str = Field(
        default="Recipe Catalog", validation_alias="CATALOG_SERVICE_NAME"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
