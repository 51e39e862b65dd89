"""
fabric_services.store -- Document record store.

Responsibility:
    Keep the business documents (fabrics, purchases, orders, expenses,
    suppliers, customers) as loosely typed dicts grouped by collection, and
    notify subscribers after every write.

Architecture position:
    Services -- imperative shell.  Engines never see the store; services
    read a snapshot (fabric_services.snapshot), run the engines and write
    the result back here.

Invariants enforced:
    - update() is a shallow merge.  A list field in the partial document
      replaces the stored list entirely (a fabric's ``rolls`` is always
      written whole).
    - Each write to a collection notifies every subscriber of that
      collection with the full, freshly read record list.
    - list() returns records in creation order, each carrying its ``id``.
    - Concurrent writers are not isolated: the last write wins.

Failure modes:
    - RecordNotFoundError from get/update/delete for an unknown id.
    - UnknownCollectionError for a collection name outside COLLECTIONS.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import func, select

from fabric_kernel.db.engine import session_scope
from fabric_kernel.exceptions import RecordNotFoundError, UnknownCollectionError
from fabric_kernel.logging_config import get_logger
from fabric_kernel.models.record import StoredRecord

logger = get_logger("services.store")

FABRICS = "fabrics"
PURCHASES = "purchases"
ORDERS = "orders"
EXPENSES = "expenses"
SUPPLIERS = "suppliers"
CUSTOMERS = "customers"

COLLECTIONS: tuple[str, ...] = (
    FABRICS,
    PURCHASES,
    ORDERS,
    EXPENSES,
    SUPPLIERS,
    CUSTOMERS,
)

Record = dict[str, Any]
Subscriber = Callable[[list[Record]], None]


class RecordStore(ABC):
    """
    Abstract document store.

    Subclasses implement the five CRUD primitives; subscription and change
    notification are shared.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = {}

    @staticmethod
    def _check(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise UnknownCollectionError(collection)

    @abstractmethod
    def create(self, collection: str, record: Mapping[str, Any]) -> str:
        """Insert a document and return its new id."""

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Record:
        """Return one document including its ``id``."""

    @abstractmethod
    def update(self, collection: str, record_id: str, partial: Mapping[str, Any]) -> None:
        """Shallow-merge ``partial`` into the stored document."""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        """Remove a document."""

    @abstractmethod
    def list(self, collection: str) -> list[Record]:
        """All documents of a collection in creation order."""

    def subscribe_all(self, collection: str, callback: Subscriber) -> Callable[[], None]:
        """
        Register ``callback`` for a collection.

        The callback receives the current record list immediately and again
        after every write.  Returns a function that unsubscribes it.
        """
        self._check(collection)
        callbacks = self._subscribers.setdefault(collection, [])
        callbacks.append(callback)
        callback(self.list(collection))

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        callbacks = list(self._subscribers.get(collection, ()))
        if not callbacks:
            return
        records = self.list(collection)
        for callback in callbacks:
            callback(records)


class SqlRecordStore(RecordStore):
    """
    RecordStore over the ``records`` table.

    Uses the module-level engine from fabric_kernel.db.engine; callers run
    ``init_engine_from_url`` and ``create_tables`` first.  Each call is its
    own transaction.
    """

    def create(self, collection: str, record: Mapping[str, Any]) -> str:
        self._check(collection)
        body = {k: v for k, v in record.items() if k != "id"}
        with session_scope() as session:
            last = session.scalar(
                select(func.max(StoredRecord.seq)).where(
                    StoredRecord.collection == collection
                )
            )
            row = StoredRecord(
                collection=collection,
                seq=(last or 0) + 1,
                body=body,
            )
            session.add(row)
            session.flush()
            record_id = row.id

        logger.info(
            "record_created",
            extra={"collection": collection, "record_id": record_id},
        )
        self._notify(collection)
        return record_id

    def get(self, collection: str, record_id: str) -> Record:
        self._check(collection)
        with session_scope() as session:
            row = self._row(session, collection, record_id)
            return {"id": row.id, **row.body}

    def update(self, collection: str, record_id: str, partial: Mapping[str, Any]) -> None:
        self._check(collection)
        changes = {k: v for k, v in partial.items() if k != "id"}
        with session_scope() as session:
            row = self._row(session, collection, record_id)
            # New dict so the JSON column registers the change.
            row.body = {**row.body, **changes}

        logger.info(
            "record_updated",
            extra={
                "collection": collection,
                "record_id": record_id,
                "fields": sorted(changes),
            },
        )
        self._notify(collection)

    def delete(self, collection: str, record_id: str) -> None:
        self._check(collection)
        with session_scope() as session:
            session.delete(self._row(session, collection, record_id))

        logger.info(
            "record_deleted",
            extra={"collection": collection, "record_id": record_id},
        )
        self._notify(collection)

    def list(self, collection: str) -> list[Record]:
        self._check(collection)
        with session_scope() as session:
            rows = session.scalars(
                select(StoredRecord)
                .where(StoredRecord.collection == collection)
                .order_by(StoredRecord.seq)
            ).all()
            return [{"id": row.id, **row.body} for row in rows]

    @staticmethod
    def _row(session, collection: str, record_id: str) -> StoredRecord:
        row = session.get(StoredRecord, record_id)
        if row is None or row.collection != collection:
            raise RecordNotFoundError(collection, record_id)
        return row
