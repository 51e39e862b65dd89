"""
Typed exceptions for the fabric ERP packages.

The calculation core deliberately raises almost nothing: missing prices,
empty roll lists, unknown fabrics and vanished deduction targets are the
normal state of commercial records and degrade to ``0`` or a no-op.  What
remains are failures of the surrounding shell -- a record id that the store
does not know, or a configuration file with invalid values.

Every exception carries a class-level ``code`` so callers can branch on
type and log a stable, machine-readable identifier:

    FabricErpError (base)
    |
    +-- StoreError
    |   +-- RecordNotFoundError
    |   +-- UnknownCollectionError
    |
    +-- ConfigurationError
"""


class FabricErpError(Exception):
    """Base exception for all fabric ERP errors."""

    code: str = "FABRIC_ERP_ERROR"


class StoreError(FabricErpError):
    """Base exception for record store failures."""

    code: str = "STORE_ERROR"


class RecordNotFoundError(StoreError):
    """No record with the given id exists in the collection."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Record not found: {collection}/{record_id}")


class UnknownCollectionError(StoreError):
    """The collection name is not one the store manages."""

    code: str = "UNKNOWN_COLLECTION"

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Unknown collection: {collection}")


class ConfigurationError(FabricErpError):
    """A settings value is present but invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid setting {key}={value!r}: {reason}")
