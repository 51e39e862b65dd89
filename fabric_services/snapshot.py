"""Read every collection the engines need and normalize it into a Snapshot."""

from __future__ import annotations

from fabric_kernel.domain.normalize import (
    contact_from_record,
    expense_from_record,
    fabric_from_record,
    order_from_record,
    purchase_from_record,
)
from fabric_kernel.domain.records import Snapshot
from fabric_services.store import (
    CUSTOMERS,
    EXPENSES,
    FABRICS,
    ORDERS,
    PURCHASES,
    SUPPLIERS,
    RecordStore,
)


def load_snapshot(store: RecordStore) -> Snapshot:
    return Snapshot(
        fabrics=tuple(fabric_from_record(r, r["id"]) for r in store.list(FABRICS)),
        purchases=tuple(purchase_from_record(r, r["id"]) for r in store.list(PURCHASES)),
        orders=tuple(order_from_record(r, r["id"]) for r in store.list(ORDERS)),
        expenses=tuple(expense_from_record(r, r["id"]) for r in store.list(EXPENSES)),
        suppliers=tuple(contact_from_record(r, r["id"]) for r in store.list(SUPPLIERS)),
        customers=tuple(contact_from_record(r, r["id"]) for r in store.list(CUSTOMERS)),
    )
