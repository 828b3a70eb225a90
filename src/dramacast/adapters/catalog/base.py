"""Base interface for the catalog document store."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from dramacast.domain.enums import Collection

ASCENDING = 1
DESCENDING = -1

Document = dict[str, Any]
Filter = Mapping[str, Any]
Sort = list[tuple[str, int]]

OPERATORS = frozenset({"$lte", "$lt", "$gte", "$gt", "$ne", "$exists"})


class CatalogStoreError(Exception):
    """Base error raised by catalog store implementations."""


class DuplicateDocumentError(CatalogStoreError):
    """A write violated a unique key."""


class StorageExhaustedError(CatalogStoreError):
    """The backing storage is out of space."""


class CatalogStore(ABC):
    """Generic document store holding the catalog collections.

    Implementations:
    - SqlCatalogStore: SQLAlchemy tables (production)
    - InMemoryCatalogStore: dicts guarded by a lock (tests, local runs)

    Filters are equality matches (``None`` matching a null or missing field)
    plus the comparison operators in ``OPERATORS``, e.g.
    ``{"status": {"$ne": "released"}, "scheduled_release_at": {"$lte": now}}``.
    """

    @abstractmethod
    def find(
        self,
        collection: Collection,
        filter: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[Document]:
        """Return matching documents."""
        ...

    @abstractmethod
    def find_one(self, collection: Collection, filter: Filter) -> Document | None:
        """Return the first matching document, if any."""
        ...

    @abstractmethod
    def insert(self, collection: Collection, document: Document) -> UUID:
        """Insert a document and return its id.

        Raises:
            DuplicateDocumentError: If a unique key is already taken.
            StorageExhaustedError: If the store is out of space.
        """
        ...

    @abstractmethod
    def update_by_id(self, collection: Collection, id: UUID, patch: Document) -> bool:
        """Apply ``patch`` to one document. Returns False if it does not exist."""
        ...

    @abstractmethod
    def delete_by_id(self, collection: Collection, id: UUID) -> bool:
        """Delete one document. Returns False if it does not exist."""
        ...

    @abstractmethod
    def count(self, collection: Collection, filter: Filter | None = None) -> int:
        """Count matching documents."""
        ...

    def health_check(self) -> bool:
        """Check if the store is reachable."""
        return True


def is_operator_clause(value: Any) -> bool:
    """True if ``value`` is an operator clause like ``{"$lte": x}``."""
    return isinstance(value, Mapping) and bool(value) and all(k in OPERATORS for k in value)


def matches(document: Mapping[str, Any], filter: Filter | None) -> bool:
    """Evaluate a store filter against a document in Python."""
    for key, condition in (filter or {}).items():
        present = key in document and document[key] is not None
        value = document.get(key)
        if not is_operator_clause(condition):
            if condition is None:
                if present:
                    return False
            elif value != condition:
                return False
            continue

        for op, operand in condition.items():
            if op == "$exists":
                if present != bool(operand):
                    return False
            elif op == "$ne":
                if operand is None:
                    if not present:
                        return False
                elif value == operand:
                    return False
            elif not present:
                return False
            elif op == "$lte" and not value <= operand:
                return False
            elif op == "$lt" and not value < operand:
                return False
            elif op == "$gte" and not value >= operand:
                return False
            elif op == "$gt" and not value > operand:
                return False
    return True
