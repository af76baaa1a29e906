"""
Document store abstraction with an in-memory and a SQLAlchemy implementation.

A document store holds named partitions, each an ordered set of JSON
documents keyed by ``id``. The SQL implementation maps every partition to its
own table so partitions can be created, listed and dropped at runtime.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Protocol, Sequence

from sqlalchemy import (
    JSON,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    func,
    inspect,
    insert,
    select,
    text,
    update,
)
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session, sessionmaker

from catalog.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

Document = dict[str, Any]


@dataclass(frozen=True)
class Criterion:
    """
    A single filter on a document field.

    ``eq`` compares for equality, ``icontains`` is a case-insensitive
    substring match (any element matches for list fields), ``lte`` is an
    inclusive upper bound. A missing or null field never matches.
    """

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in ("eq", "icontains", "lte"):
            raise ValueError(f"Unsupported criterion operator: {self.op}")

    def matches(self, document: Document) -> bool:
        actual = document.get(self.field)
        if actual is None:
            return False
        if self.op == "eq":
            return actual == self.value
        if self.op == "lte":
            return actual <= self.value
        needle = str(self.value).lower()
        if isinstance(actual, (list, tuple)):
            return any(needle in str(item).lower() for item in actual)
        return needle in str(actual).lower()


def matches_all(document: Document, criteria: Iterable[Criterion]) -> bool:
    return all(criterion.matches(document) for criterion in criteria)


def _new_id() -> str:
    return uuid.uuid4().hex


class DocumentStore(Protocol):
    """Operations the catalog needs from a partitioned document store."""

    def list_partitions(self) -> list[str]:
        ...

    def partition_exists(self, name: str) -> bool:
        ...

    def create_partition(self, name: str) -> None:
        ...

    def drop_partition(self, name: str) -> None:
        ...

    def insert(self, partition: str, document: Document) -> Document:
        ...

    def find(
        self, partition: str, criteria: Sequence[Criterion] = ()
    ) -> list[Document]:
        ...

    def find_one(self, partition: str, document_id: str) -> Optional[Document]:
        ...

    def save(self, partition: str, document: Document) -> Document:
        ...

    def remove(self, partition: str, document_id: str) -> int:
        ...

    def count(self, partition: str) -> int:
        ...

    def ping(self) -> None:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.partitions: dict[str, dict[str, Document]] = {}
        self.available = True

    def _check(self) -> None:
        if not self.available:
            raise StorageUnavailableError("In-memory document store is offline")

    def reset(self) -> None:
        """Drop every partition (useful in tests)."""
        self.partitions.clear()
        self.available = True

    def list_partitions(self) -> list[str]:
        self._check()
        return list(self.partitions)

    def partition_exists(self, name: str) -> bool:
        self._check()
        return name in self.partitions

    def create_partition(self, name: str) -> None:
        self._check()
        self.partitions.setdefault(name, {})

    def drop_partition(self, name: str) -> None:
        self._check()
        self.partitions.pop(name, None)

    def insert(self, partition: str, document: Document) -> Document:
        self._check()
        stored = copy.deepcopy(document)
        if not stored.get("id"):
            stored["id"] = _new_id()
        docs = self.partitions.setdefault(partition, {})
        if stored["id"] in docs:
            raise ValueError(
                f"Duplicate id {stored['id']} in partition {partition}"
            )
        docs[stored["id"]] = stored
        return copy.deepcopy(stored)

    def find(
        self, partition: str, criteria: Sequence[Criterion] = ()
    ) -> list[Document]:
        self._check()
        docs = self.partitions.get(partition, {})
        return [
            copy.deepcopy(doc) for doc in docs.values() if matches_all(doc, criteria)
        ]

    def find_one(self, partition: str, document_id: str) -> Optional[Document]:
        self._check()
        doc = self.partitions.get(partition, {}).get(document_id)
        return copy.deepcopy(doc) if doc is not None else None

    def save(self, partition: str, document: Document) -> Document:
        self._check()
        stored = copy.deepcopy(document)
        if not stored.get("id"):
            stored["id"] = _new_id()
        self.partitions.setdefault(partition, {})[stored["id"]] = stored
        return copy.deepcopy(stored)

    def remove(self, partition: str, document_id: str) -> int:
        self._check()
        docs = self.partitions.get(partition)
        if docs is None or document_id not in docs:
            return 0
        del docs[document_id]
        return 1

    def count(self, partition: str) -> int:
        self._check()
        return len(self.partitions.get(partition, {}))

    def ping(self) -> None:
        self._check()


_MISSING = object()


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Each partition is a table with an autoincrementing ``seq`` column that
    preserves insertion order, a unique ``id`` and a JSON ``document``.
    Partition names longer than the dialect's identifier limit (63 bytes on
    Postgres) are stored under a shortened name ending in a hash of the full
    name, so DDL and lookups always agree on the physical table.

    Reads do not check for the table first. A table dropped by a concurrent
    writer reads as an empty partition, and writes create it on demand.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        self.metadata = MetaData()

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except (
            sa_exc.OperationalError,
            sa_exc.InterfaceError,
            sa_exc.DisconnectionError,
        ) as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def table_name(self, name: str) -> str:
        """Physical table name for partition ``name``."""
        limit = self.engine.dialect.max_identifier_length
        if len(name.encode("utf-8")) <= limit:
            return name
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
        head = name
        while len(head.encode("utf-8")) > limit - len(digest) - 1:
            head = head[:-1]
        return f"{head}_{digest}"

    def _table(self, name: str) -> Table:
        physical = self.table_name(name)
        table = self.metadata.tables.get(physical)
        if table is not None:
            return table
        return Table(
            physical,
            self.metadata,
            Column("seq", Integer, primary_key=True, autoincrement=True),
            Column("id", String(64), nullable=False, unique=True),
            Column("document", JSON, nullable=False),
        )

    def _run(self, partition: str, work, missing: Any = _MISSING) -> Any:
        """
        Run ``work(session, table)`` against the partition's table.

        Returns ``missing`` when the statement failed because the table does
        not exist. Lost connections raise ``StorageUnavailableError``.
        """
        table = self._table(partition)
        try:
            with self.Session() as session:
                return work(session, table)
        except (sa_exc.OperationalError, sa_exc.ProgrammingError) as exc:
            if not exc.connection_invalidated and not self.partition_exists(partition):
                logger.debug("Partition table '%s' does not exist", table.name)
                return missing
            if isinstance(exc, sa_exc.ProgrammingError):
                raise
            raise StorageUnavailableError(str(exc)) from exc
        except (sa_exc.InterfaceError, sa_exc.DisconnectionError) as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def _write(self, partition: str, work) -> Any:
        result = self._run(partition, work)
        if result is _MISSING:
            self.create_partition(partition)
            result = self._run(partition, work)
        if result is _MISSING:
            raise StorageUnavailableError(
                f"Partition '{partition}' was dropped while writing to it"
            )
        return result

    def list_partitions(self) -> list[str]:
        with self._guard():
            return inspect(self.engine).get_table_names()

    def partition_exists(self, name: str) -> bool:
        with self._guard():
            return inspect(self.engine).has_table(self.table_name(name))

    def create_partition(self, name: str) -> None:
        table = self._table(name)
        with self._guard():
            try:
                table.create(self.engine, checkfirst=True)
            except (
                sa_exc.OperationalError,
                sa_exc.ProgrammingError,
                sa_exc.IntegrityError,
            ) as exc:
                # Another writer may have created it between the check and the create.
                if self.partition_exists(name):
                    return
                raise StorageUnavailableError(str(exc)) from exc
        logger.info("Created partition table '%s'", table.name)

    def drop_partition(self, name: str) -> None:
        table = self._table(name)
        with self._guard():
            table.drop(self.engine, checkfirst=True)
        logger.info("Dropped partition table '%s'", table.name)

    def insert(self, partition: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        if not stored.get("id"):
            stored["id"] = _new_id()

        def work(session: Session, table: Table) -> Document:
            session.execute(insert(table).values(id=stored["id"], document=stored))
            session.commit()
            return stored

        return self._write(partition, work)

    def find(
        self, partition: str, criteria: Sequence[Criterion] = ()
    ) -> list[Document]:
        def work(session: Session, table: Table) -> list[Document]:
            rows = session.execute(
                select(table.c.document).order_by(table.c.seq.asc())
            ).scalars()
            return [doc for doc in rows if matches_all(doc, criteria)]

        return self._run(partition, work, missing=[])

    def find_one(self, partition: str, document_id: str) -> Optional[Document]:
        def work(session: Session, table: Table) -> Optional[Document]:
            return session.execute(
                select(table.c.document).where(table.c.id == document_id)
            ).scalar_one_or_none()

        return self._run(partition, work, missing=None)

    def save(self, partition: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        if not stored.get("id"):
            return self.insert(partition, stored)

        def work(session: Session, table: Table) -> Document:
            result = session.execute(
                update(table)
                .where(table.c.id == stored["id"])
                .values(document=stored)
            )
            if not result.rowcount:
                session.execute(
                    insert(table).values(id=stored["id"], document=stored)
                )
            session.commit()
            return stored

        return self._write(partition, work)

    def remove(self, partition: str, document_id: str) -> int:
        def work(session: Session, table: Table) -> int:
            result = session.execute(delete(table).where(table.c.id == document_id))
            session.commit()
            return result.rowcount or 0

        return self._run(partition, work, missing=0)

    def count(self, partition: str) -> int:
        def work(session: Session, table: Table) -> int:
            return session.execute(
                select(func.count()).select_from(table)
            ).scalar_one()

        return self._run(partition, work, missing=0)

    def ping(self) -> None:
        with self._guard(), self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
