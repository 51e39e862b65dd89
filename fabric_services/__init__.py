"""
fabric_services -- Package init and public API.

Responsibility:
    Stateful shell around the pure engines: the record store, snapshot
    loading, and the inventory, invoicing, sales-order and contact
    services.  This is the only layer that reads or writes documents or
    uses wall-clock time.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction:
        fabric_services/ -> fabric_engines/  (allowed)
        fabric_services/ -> fabric_kernel/   (allowed)
        fabric_engines/  -> fabric_services/ (FORBIDDEN)
        fabric_kernel/   -> fabric_services/ (FORBIDDEN)
"""

from fabric_services.contacts import ContactService
from fabric_services.inventory_service import InventoryService
from fabric_services.invoicing import InvoiceService, purchase_line
from fabric_services.sales_service import SalesOrderService, order_line
from fabric_services.snapshot import load_snapshot
from fabric_services.store import COLLECTIONS, RecordStore, SqlRecordStore

__all__ = [
    "COLLECTIONS",
    "ContactService",
    "InventoryService",
    "InvoiceService",
    "RecordStore",
    "SalesOrderService",
    "SqlRecordStore",
    "load_snapshot",
    "order_line",
    "purchase_line",
]
