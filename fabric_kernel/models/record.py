"""
Module: fabric_kernel.models.record
Responsibility: ORM persistence for schemaless business documents.  Every
    fabric, purchase, order, expense, supplier and customer is one row holding
    its JSON body, grouped by collection name.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - collection is never null; ids are unique across all collections.
    - body is the whole document; partial updates are merged by the store
      before the row is written.
"""

from typing import Any

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fabric_kernel.db.base import TimestampedBase


class StoredRecord(TimestampedBase):
    """One document in one collection."""

    __tablename__ = "records"

    __table_args__ = (
        Index("idx_records_collection", "collection", "seq"),
    )

    collection: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    # Insertion order; list() returns documents in the order they were created
    seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    body: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    def __repr__(self) -> str:
        return f"<StoredRecord {self.collection}/{self.id}>"
