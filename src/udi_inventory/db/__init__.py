"""Record stores for UDI Inventory."""

from udi_inventory.db.memory import InMemoryRecordStore
from udi_inventory.db.postgres import PostgresRecordStore
from udi_inventory.db.store import RecordNotFoundError, RecordStore, RecordStoreError

__all__ = [
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreError",
]
