"""
Recipe store: CRUD and search over category-partitioned recipes.

Each recipe lives in the partition of its category. Reads that are not
scoped to a category fan out over every partition and concatenate the
results; there is no snapshot across partitions, so a concurrent write may or
may not be observed by a fan-out.

Changing a recipe's category is a move: the document is removed from the old
partition and inserted into the new one with the same ``id`` and
``created_by``. The two steps are not atomic. Between them the recipe is
absent from both partitions, and readers in that window will not find it.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

from catalog.documents import Criterion, DocumentStore
from catalog.errors import RecipeNotFoundError, StorageUnavailableError
from catalog.models import Recipe, RecipePage
from catalog.naming import DEFAULT_NAMING, PartitionNaming, is_blank
from catalog.partitions import PartitionDirectory

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class RecipeLocator(Protocol):
    """Finds the recipe holding ``recipe_id`` regardless of its partition."""

    def locate(self, recipe_id: str) -> Optional[Recipe]:
        ...


class PartitionScanLocator:
    """Locates recipes by asking every partition in turn; first match wins."""

    def __init__(self, store: "RecipeStore"):
        self.store = store

    def locate(self, recipe_id: str) -> Optional[Recipe]:
        for category in self.store.list_categories():
            recipe = self.store.get_recipe_by_category_and_id(category, recipe_id)
            if recipe is not None:
                logger.debug("Found recipe ID '%s' in category '%s'", recipe_id, category)
                return recipe
        return None


class RecipeStore:
    def __init__(
        self,
        documents: DocumentStore,
        naming: Optional[PartitionNaming] = None,
        directory: Optional[PartitionDirectory] = None,
        locator: Optional[RecipeLocator] = None,
        service_name: str = "Recipe Catalog",
    ):
        self.documents = documents
        self.naming = naming or DEFAULT_NAMING
        self.directory = directory or PartitionDirectory(documents, self.naming)
        self.locator = locator or PartitionScanLocator(self)
        self.service_name = service_name

    # ==========================================
    # Partition helpers
    # ==========================================

    def list_categories(self) -> list[str]:
        return self.directory.list_categories()

    def _category_or_default(self, category: Optional[str]) -> str:
        return self.naming.default_category if is_blank(category) else category

    def _drop_if_empty(self, partition: str) -> None:
        if self.naming.is_default_partition(partition):
            logger.debug(
                "Partition '%s' is the default partition and is kept even if empty",
                partition,
            )
            return
        if not self.directory.exists(partition):
            return
        remaining = self.directory.count(partition)
        logger.debug("Partition '%s' now has %d recipes", partition, remaining)
        if remaining == 0:
            self.directory.drop(partition)

    def _fan_out(self, criteria: Sequence[Criterion] = ()) -> list[Recipe]:
        results: list[Recipe] = []
        for category in self.list_categories():
            partition = self.naming.partition_for(category)
            if not self.directory.exists(partition):
                logger.warning(
                    "Partition '%s' for category '%s' vanished during scan",
                    partition,
                    category,
                )
                continue
            results.extend(
                Recipe.from_document(doc)
                for doc in self.documents.find(partition, criteria)
            )
        return results

    # ==========================================
    # CRUD
    # ==========================================

    def create_recipe(self, recipe: Recipe, username: str) -> Recipe:
        category = self._category_or_default(recipe.category)
        new_recipe = dataclasses.replace(
            recipe, id=None, category=category, created_by=username
        )
        partition = self.directory.ensure_exists(category)
        logger.info(
            "Creating recipe '%s' in partition '%s' by user '%s'",
            new_recipe.title,
            partition,
            username,
        )
        stored = self.documents.insert(partition, new_recipe.as_document())
        return Recipe.from_document(stored)

    def get_recipe_by_category_and_id(
        self, category: Optional[str], recipe_id: str
    ) -> Optional[Recipe]:
        partition = self.naming.partition_for(category)
        doc = self.documents.find_one(partition, recipe_id)
        if doc is None:
            return None
        return Recipe.from_document(doc)

    def get_recipe_by_id(self, recipe_id: str) -> Recipe:
        logger.debug("Looking up recipe ID '%s' across all categories", recipe_id)
        recipe = self.locator.locate(recipe_id)
        if recipe is None:
            logger.warning("Recipe with ID '%s' not found in any category", recipe_id)
            raise RecipeNotFoundError(recipe_id)
        return recipe

    def get_all_recipes(self) -> list[Recipe]:
        logger.debug("Fetching all recipes")
        return self._fan_out()

    def update_recipe(self, recipe_id: str, details: Recipe) -> Recipe:
        existing = self.get_recipe_by_id(recipe_id)
        new_category = self._category_or_default(details.category)
        old_partition = self.naming.partition_for(existing.category)
        new_partition = self.naming.partition_for(new_category)

        updated = dataclasses.replace(
            details,
            id=existing.id,
            created_by=existing.created_by,
            category=new_category,
        )

        if old_partition == new_partition:
            logger.info(
                "Updating recipe ID '%s' in place in partition '%s'",
                recipe_id,
                old_partition,
            )
            stored = self.documents.save(new_partition, updated.as_document())
            return Recipe.from_document(stored)

        logger.info(
            "Moving recipe ID '%s' from partition '%s' to '%s'",
            recipe_id,
            old_partition,
            new_partition,
        )
        self.documents.remove(old_partition, recipe_id)
        self._drop_if_empty(old_partition)
        self.directory.ensure_exists(new_category)
        stored = self.documents.insert(new_partition, updated.as_document())
        return Recipe.from_document(stored)

    def delete_recipe(self, recipe_id: str) -> None:
        recipe = self.get_recipe_by_id(recipe_id)
        partition = self.naming.partition_for(recipe.category)
        logger.info(
            "Deleting recipe ID '%s' ('%s') from partition '%s'",
            recipe_id,
            recipe.title,
            partition,
        )
        self.documents.remove(partition, recipe_id)
        self._drop_if_empty(partition)

    # ==========================================
    # Search
    # ==========================================

    def get_recipes_by_user(self, username: str) -> list[Recipe]:
        logger.debug("Fetching recipes created by '%s'", username)
        return self._fan_out([Criterion("createdBy", "eq", username)])

    def get_recipes_by_user_page(
        self, username: str, page_no: int = 0, page_size: int = 10
    ) -> RecipePage:
        return RecipePage.from_items(
            self.get_recipes_by_user(username), page_no=page_no, page_size=page_size
        )

    def search_by_title(self, title: Optional[str]) -> list[Recipe]:
        needle = (title or "").strip()
        logger.debug("Searching recipes with title containing '%s'", needle)
        return self._fan_out([Criterion("title", "icontains", needle)])

    def search_by_ingredient(self, ingredient: Optional[str]) -> list[Recipe]:
        needle = (ingredient or "").strip()
        logger.debug("Searching recipes with ingredient containing '%s'", needle)
        return self._fan_out([Criterion("ingredients", "icontains", needle)])

    def search_by_cooking_time(self, max_minutes: Optional[int]) -> list[Recipe]:
        if max_minutes is None or max_minutes < 0:
            logger.warning("Invalid cooking time for search: %s", max_minutes)
            return []
        logger.debug("Searching recipes with cooking time <= %d minutes", max_minutes)
        return self._fan_out([Criterion("cookingTime", "lte", max_minutes)])

    def search_by_category(self, category: Optional[str]) -> list[Recipe]:
        partition = self.naming.partition_for(category)
        if not self.directory.exists(partition):
            logger.warning(
                "Category '%s' (partition '%s') not found for search",
                category,
                partition,
            )
            return []
        return [Recipe.from_document(doc) for doc in self.documents.find(partition)]

    def advanced_search(
        self,
        title: Optional[str] = None,
        category: Optional[str] = None,
        max_cooking_time: Optional[int] = None,
        ingredient: Optional[str] = None,
    ) -> list[Recipe]:
        """
        Combine any of the filters; absent or blank filters are ignored.

        With a category only that partition is searched. With no filters at
        all every recipe is returned, same as ``get_all_recipes``.
        """
        logger.debug(
            "Advanced search title=%r category=%r max_cooking_time=%r ingredient=%r",
            title,
            category,
            max_cooking_time,
            ingredient,
        )
        title = _clean(title)
        category = _clean(category)
        ingredient = _clean(ingredient)

        criteria: list[Criterion] = []
        if title:
            criteria.append(Criterion("title", "icontains", title))
        if max_cooking_time is not None and max_cooking_time >= 0:
            criteria.append(Criterion("cookingTime", "lte", max_cooking_time))
        if ingredient:
            criteria.append(Criterion("ingredients", "icontains", ingredient))

        if category:
            partition = self.naming.partition_for(category)
            if not self.directory.exists(partition):
                logger.warning(
                    "Advanced search: category '%s' (partition '%s') does not exist",
                    category,
                    partition,
                )
                return []
            results = [
                Recipe.from_document(doc)
                for doc in self.documents.find(partition, criteria)
            ]
        else:
            results = self._fan_out(criteria)
        logger.info("Advanced search found %d results", len(results))
        return results

    # ==========================================
    # Health
    # ==========================================

    def health(self) -> dict:
        try:
            self.documents.ping()
            status = "UP"
        except StorageUnavailableError as exc:
            logger.warning("Document store unavailable: %s", exc)
            status = "DOWN"
        return {
            "status": status,
            "service": self.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
