"""In-memory catalog store for tests and local runs."""

import copy
import threading
from functools import cmp_to_key
from uuid import UUID, uuid4

from dramacast.adapters.catalog.base import (
    CatalogStore,
    Document,
    DuplicateDocumentError,
    Filter,
    Sort,
    matches,
)
from dramacast.domain.enums import Collection

# Unique keys per collection. A key is skipped while any of its fields is null,
# which mirrors a partial index on pending_series_id.
UNIQUE_KEYS: dict[Collection, list[tuple[str, ...]]] = {
    Collection.LIVE_SERIES: [("pending_series_id",)],
    Collection.LIVE_EPISODES: [("series_id", "episode_number")],
    Collection.PENDING_EPISODES: [("pending_series_id", "episode_number")],
}


def _compare(a: Document, b: Document, sort: Sort) -> int:
    for field, direction in sort:
        left, right = a.get(field), b.get(field)
        if left == right:
            continue
        # Nulls sort first ascending
        if left is None:
            result = -1
        elif right is None:
            result = 1
        else:
            result = -1 if left < right else 1
        return result * direction
    return 0


class InMemoryCatalogStore(CatalogStore):
    """Catalog store backed by plain dicts.

    Every call takes a lock and hands out deep copies, so callers see the same
    isolation they would get from a real database.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[Collection, dict[UUID, Document]] = {
            collection: {} for collection in Collection
        }

    def _check_unique(self, collection: Collection, doc: Document, exclude: UUID | None) -> None:
        for key in UNIQUE_KEYS.get(collection, []):
            values = tuple(doc.get(field) for field in key)
            if any(v is None for v in values):
                continue
            for other_id, other in self._collections[collection].items():
                if other_id == exclude:
                    continue
                if tuple(other.get(field) for field in key) == values:
                    raise DuplicateDocumentError(
                        f"Duplicate key {dict(zip(key, values))} in {collection}"
                    )

    def find(
        self,
        collection: Collection,
        filter: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[Document]:
        with self._lock:
            found = [
                copy.deepcopy(doc)
                for doc in self._collections[collection].values()
                if matches(doc, filter)
            ]
        if sort:
            found.sort(key=cmp_to_key(lambda a, b: _compare(a, b, sort)))
        found = found[skip:]
        if limit is not None:
            found = found[:limit]
        return found

    def find_one(self, collection: Collection, filter: Filter) -> Document | None:
        found = self.find(collection, filter, limit=1)
        return found[0] if found else None

    def insert(self, collection: Collection, document: Document) -> UUID:
        doc = copy.deepcopy(document)
        doc_id = doc.get("id") or uuid4()
        doc["id"] = doc_id
        with self._lock:
            if doc_id in self._collections[collection]:
                raise DuplicateDocumentError(f"Document {doc_id} already exists in {collection}")
            self._check_unique(collection, doc, exclude=None)
            self._collections[collection][doc_id] = doc
        return doc_id

    def update_by_id(self, collection: Collection, id: UUID, patch: Document) -> bool:
        with self._lock:
            current = self._collections[collection].get(id)
            if current is None:
                return False
            updated = {**current, **copy.deepcopy(patch), "id": id}
            self._check_unique(collection, updated, exclude=id)
            self._collections[collection][id] = updated
        return True

    def delete_by_id(self, collection: Collection, id: UUID) -> bool:
        with self._lock:
            return self._collections[collection].pop(id, None) is not None

    def count(self, collection: Collection, filter: Filter | None = None) -> int:
        with self._lock:
            return sum(1 for doc in self._collections[collection].values() if matches(doc, filter))
