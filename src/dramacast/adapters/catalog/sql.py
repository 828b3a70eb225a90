"""SQLAlchemy-backed catalog store."""

import errno
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, func, or_, select, text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dramacast.adapters.catalog.base import (
    DESCENDING,
    CatalogStore,
    CatalogStoreError,
    Document,
    DuplicateDocumentError,
    Filter,
    Sort,
    StorageExhaustedError,
    is_operator_clause,
)
from dramacast.db.models import (
    Base,
    LiveEpisodeModel,
    LiveSeriesModel,
    PendingEpisodeModel,
    PendingSeriesModel,
    SeriesTransferLogModel,
)
from dramacast.domain.enums import Collection
from dramacast.logging import get_logger

logger = get_logger(__name__)

MODELS: dict[Collection, type[Base]] = {
    Collection.PENDING_SERIES: PendingSeriesModel,
    Collection.PENDING_EPISODES: PendingEpisodeModel,
    Collection.LIVE_SERIES: LiveSeriesModel,
    Collection.LIVE_EPISODES: LiveEpisodeModel,
    Collection.TRANSFER_LOGS: SeriesTransferLogModel,
}

# PostgreSQL SQLSTATE codes
PG_UNIQUE_VIOLATION = "23505"
PG_DISK_FULL = "53100"

DISK_FULL_MARKERS = ("no space left on device", "database or disk is full", "disk full")


def _is_disk_full(exc: BaseException) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == PG_DISK_FULL:
        return True
    if isinstance(orig, OSError) and orig.errno == errno.ENOSPC:
        return True
    message = str(orig or exc).lower()
    return any(marker in message for marker in DISK_FULL_MARKERS)


def _is_unique_violation(exc: IntegrityError) -> bool:
    if getattr(exc.orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class SqlCatalogStore(CatalogStore):
    """Catalog store over the ``dramacast.db.models`` tables.

    Each operation runs in its own short transaction, so every write is atomic
    for the single row it touches and nothing spans documents.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from dramacast.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if _is_unique_violation(e):
                raise DuplicateDocumentError(str(e.orig)) from e
            raise CatalogStoreError(str(e.orig)) from e
        except OperationalError as e:
            session.rollback()
            if _is_disk_full(e):
                raise StorageExhaustedError(str(e.orig)) from e
            raise CatalogStoreError(str(e.orig)) from e
        except OSError as e:
            session.rollback()
            if e.errno == errno.ENOSPC:
                raise StorageExhaustedError(str(e)) from e
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise CatalogStoreError(str(e)) from e
        finally:
            session.close()

    @staticmethod
    def _model(collection: Collection) -> type[Base]:
        return MODELS[Collection(collection)]

    @staticmethod
    def _to_document(row: Base) -> Document:
        return {attr.key: getattr(row, attr.key) for attr in row.__mapper__.column_attrs}

    def _where(self, model: type[Base], filter: Filter | None) -> list[Any]:
        clauses: list[Any] = []
        for key, condition in (filter or {}).items():
            column = getattr(model, key)
            if not is_operator_clause(condition):
                clauses.append(column.is_(None) if condition is None else column == condition)
                continue
            for op, operand in condition.items():
                if op == "$exists":
                    clauses.append(column.isnot(None) if operand else column.is_(None))
                elif op == "$ne":
                    if operand is None:
                        clauses.append(column.isnot(None))
                    else:
                        # Document-store semantics: a null field is "not equal"
                        clauses.append(or_(column != operand, column.is_(None)))
                elif op == "$lte":
                    clauses.append(column <= operand)
                elif op == "$lt":
                    clauses.append(column < operand)
                elif op == "$gte":
                    clauses.append(column >= operand)
                elif op == "$gt":
                    clauses.append(column > operand)
        return clauses

    def find(
        self,
        collection: Collection,
        filter: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[Document]:
        model = self._model(collection)
        stmt = select(model).where(and_(True, *self._where(model, filter)))
        for field, direction in sort or []:
            column = getattr(model, field)
            stmt = stmt.order_by(column.desc() if direction == DESCENDING else column.asc())
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        with self._session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_document(row) for row in rows]

    def find_one(self, collection: Collection, filter: Filter) -> Document | None:
        found = self.find(collection, filter, limit=1)
        return found[0] if found else None

    def insert(self, collection: Collection, document: Document) -> UUID:
        model = self._model(collection)
        values = dict(document)
        values["id"] = values.get("id") or uuid4()
        with self._session() as session:
            session.add(model(**values))
        return values["id"]

    def update_by_id(self, collection: Collection, id: UUID, patch: Document) -> bool:
        model = self._model(collection)
        with self._session() as session:
            row = session.get(model, id)
            if row is None:
                return False
            for key, value in patch.items():
                if key == "id":
                    continue
                setattr(row, key, value)
        return True

    def delete_by_id(self, collection: Collection, id: UUID) -> bool:
        model = self._model(collection)
        with self._session() as session:
            result = session.execute(delete(model).where(model.id == id))
            return result.rowcount > 0

    def count(self, collection: Collection, filter: Filter | None = None) -> int:
        model = self._model(collection)
        stmt = select(func.count()).select_from(model)
        stmt = stmt.where(and_(True, *self._where(model, filter)))
        with self._session() as session:
            return session.execute(stmt).scalar_one()

    def health_check(self) -> bool:
        try:
            with self._session() as session:
                session.execute(text("SELECT 1"))
            return True
        except CatalogStoreError as e:
            logger.error("catalog_store_health_check_failed", error=str(e))
            return False
