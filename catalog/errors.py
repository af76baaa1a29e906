"""
Exceptions raised by the catalog store.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog errors."""


class RecipeNotFoundError(CatalogError, LookupError):
    def __init__(self, recipe_id: str, message: str | None = None):
        self.recipe_id = recipe_id
        super().__init__(message or f"Recipe not found with id: {recipe_id}")


class StorageUnavailableError(CatalogError):
    """The underlying document store could not be reached."""


class InvalidArgumentError(CatalogError, ValueError):
    pass
