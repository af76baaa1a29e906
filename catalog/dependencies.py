"""
Dependency wiring for collaborators of the catalog store.
"""

from __future__ import annotations

from catalog.config import get_settings
from catalog.documents import DocumentStore, InMemoryDocumentStore, SqlDocumentStore
from catalog.naming import PartitionNaming
from catalog.recipes import RecipeStore

_document_store: DocumentStore | None = None
_recipe_store: RecipeStore | None = None


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so partitions persist across calls.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _document_store = InMemoryDocumentStore()
    else:
        _document_store = SqlDocumentStore(settings.database_url)
    return _document_store


def get_recipe_store() -> RecipeStore:
    global _recipe_store
    if _recipe_store:
        return _recipe_store

    settings = get_settings()
    naming = PartitionNaming(
        prefix=settings.partition_prefix,
        default_category=settings.default_category,
    )
    _recipe_store = RecipeStore(
        get_document_store(),
        naming=naming,
        service_name=settings.service_name,
    )
    return _recipe_store


def reset_dependencies() -> None:
    """Forget the cached store singletons (and settings) so they are rebuilt."""
    global _document_store, _recipe_store
    _document_store = None
    _recipe_store = None
    get_settings.cache_clear()
