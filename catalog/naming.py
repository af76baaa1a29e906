"""
Mapping between category labels and partition names.

Every category is stored in its own partition named ``<prefix><label>``,
where the label is lowercased, trimmed and has whitespace runs collapsed to a
single underscore. Labels that differ only in case or spacing share a
partition: ``"Main  Course"`` and ``"main course"`` both live in
``recipe_main_course``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_PREFIX = "recipe_"
DEFAULT_CATEGORY = "uncategorized"

_WHITESPACE = re.compile(r"\s+")


def is_blank(category: Optional[str]) -> bool:
    return category is None or not category.strip()


@dataclass(frozen=True)
class PartitionNaming:
    prefix: str = DEFAULT_PREFIX
    default_category: str = DEFAULT_CATEGORY

    def normalize(self, category: Optional[str]) -> str:
        """Canonical label for ``category``; blank labels fall back to the default."""
        if is_blank(category):
            category = self.default_category
        return _WHITESPACE.sub("_", category.lower().strip())

    def partition_for(self, category: Optional[str]) -> str:
        return self.prefix + self.normalize(category)

    def category_for(self, partition: str) -> str:
        if not self.is_partition(partition):
            raise ValueError(f"Not a recipe partition: {partition}")
        return partition[len(self.prefix) :]

    def is_partition(self, name: str) -> bool:
        return name.startswith(self.prefix)

    @property
    def default_partition(self) -> str:
        return self.partition_for(self.default_category)

    def is_default_partition(self, partition: str) -> bool:
        return partition == self.default_partition


DEFAULT_NAMING = PartitionNaming()


def partition_name(category: Optional[str]) -> str:
    """Partition name for ``category`` under the default prefix and sentinel."""
    return DEFAULT_NAMING.partition_for(category)
