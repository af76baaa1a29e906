"""
Recipe catalog package.

Recipes are stored in a document store with one partition per category.
Partitions are created when a category first receives a recipe and dropped
again once they become empty, so the set of categories is always discovered
from the store itself.
"""
