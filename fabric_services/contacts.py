"""
fabric_services.contacts -- Supplier and customer directories.

Responsibility:
    Keep the two contact lists the invoices refer to by name.  Suppliers
    and customers share one record shape and live in separate collections.
    Sales orders copy a customer's VAT number from here when saved.

Architecture position:
    Services -- thin persistence over the store, no engine involved.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from fabric_kernel.domain.normalize import (
    contact_from_import_row,
    contact_from_record,
    contact_to_record,
)
from fabric_kernel.domain.records import Contact, ContactKind
from fabric_kernel.logging_config import get_logger
from fabric_services.store import CUSTOMERS, SUPPLIERS, RecordStore

logger = get_logger("services.contacts")

_COLLECTION_BY_KIND = {
    ContactKind.SUPPLIER: SUPPLIERS,
    ContactKind.CUSTOMER: CUSTOMERS,
}


def collection_for(kind: ContactKind) -> str:
    return _COLLECTION_BY_KIND[ContactKind(kind)]


class ContactService:
    """
    Add, edit, delete, list and import suppliers or customers.

    Usage:
        contacts = ContactService(store)
        saved = contacts.save_contact(ContactKind.CUSTOMER,
                                      Contact("Fashion House", vat_number="EL111"))
        contacts.vat_number_for(ContactKind.CUSTOMER, "Fashion House")
    """

    def __init__(self, store: RecordStore):
        self._store = store

    def save_contact(self, kind: ContactKind, contact: Contact) -> Contact:
        """Insert (no ``record_id``) or overwrite a contact."""
        collection = collection_for(kind)
        document = contact_to_record(contact)
        if contact.record_id is None:
            record_id = self._store.create(collection, document)
        else:
            record_id = contact.record_id
            self._store.update(collection, record_id, document)

        logger.info(
            "contact_saved",
            extra={"kind": ContactKind(kind).value, "contact_id": record_id},
        )
        return self.get_contact(kind, record_id)

    def get_contact(self, kind: ContactKind, contact_id: str) -> Contact:
        return contact_from_record(self._store.get(collection_for(kind), contact_id), contact_id)

    def delete_contact(self, kind: ContactKind, contact_id: str) -> None:
        self._store.delete(collection_for(kind), contact_id)
        logger.info(
            "contact_deleted",
            extra={"kind": ContactKind(kind).value, "contact_id": contact_id},
        )

    def list_contacts(self, kind: ContactKind) -> list[Contact]:
        """Contacts of one kind in creation order."""
        return [contact_from_record(r, r["id"]) for r in self._store.list(collection_for(kind))]

    def find_by_name(self, kind: ContactKind, name: str) -> Contact | None:
        """First contact whose name matches exactly, or ``None``."""
        for contact in self.list_contacts(kind):
            if contact.name == name:
                return contact
        return None

    def vat_number_for(self, kind: ContactKind, name: str) -> str:
        contact = self.find_by_name(kind, name)
        return contact.vat_number if contact is not None else ""

    def import_rows(self, kind: ContactKind, rows: Iterable[Mapping[str, Any]]) -> list[Contact]:
        """
        Append one contact per spreadsheet row.

        Existing contacts are kept; rows are never merged with them.
        """
        collection = collection_for(kind)
        imported = []
        for row in rows:
            contact = contact_from_import_row(row)
            record_id = self._store.create(collection, contact_to_record(contact))
            imported.append(contact_from_record(self._store.get(collection, record_id), record_id))

        logger.info(
            "contacts_imported",
            extra={"kind": ContactKind(kind).value, "count": len(imported)},
        )
        return imported
