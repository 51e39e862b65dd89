"""ORM models. Importing this package registers every table on Base.metadata."""

from fabric_kernel.models.record import StoredRecord

__all__ = ["StoredRecord"]
