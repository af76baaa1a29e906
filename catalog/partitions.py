"""
Partition directory: enumerates, creates and drops category partitions.

The directory never reads or writes documents. Categories are not kept in a
separate catalog; they are whatever partitions currently carry the prefix.
"""

from __future__ import annotations

import logging
from typing import Optional

from catalog.documents import DocumentStore
from catalog.naming import DEFAULT_NAMING, PartitionNaming

logger = logging.getLogger(__name__)


class PartitionDirectory:
    def __init__(
        self, documents: DocumentStore, naming: Optional[PartitionNaming] = None
    ):
        self.documents = documents
        self.naming = naming or DEFAULT_NAMING

    def list_categories(self) -> list[str]:
        """Category labels discovered from the existing partitions."""
        return [
            self.naming.category_for(name)
            for name in self.documents.list_partitions()
            if self.naming.is_partition(name)
        ]

    def ensure_exists(self, category: Optional[str]) -> str:
        """Create the partition for ``category`` if needed and return its name."""
        name = self.naming.partition_for(category)
        if not self.documents.partition_exists(name):
            logger.info("Creating partition '%s' for category '%s'", name, category)
            self.documents.create_partition(name)
        return name

    def exists(self, partition_name: str) -> bool:
        return self.documents.partition_exists(partition_name)

    def count(self, partition_name: str) -> int:
        return self.documents.count(partition_name)

    def drop(self, partition_name: str) -> None:
        logger.info("Dropping partition '%s'", partition_name)
        self.documents.drop_partition(partition_name)
