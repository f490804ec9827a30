"""In-memory record store used in offline mode."""

from __future__ import annotations

from uuid import UUID

import structlog

from udi_inventory.core.expiration import sort_by_recency
from udi_inventory.core.models import RecordDraft
from udi_inventory.db.schemas import InventoryRecord
from udi_inventory.db.store import RecordNotFoundError, RecordStore, record_from_draft

logger = structlog.get_logger()


class InMemoryRecordStore(RecordStore):
    """Keeps records in process memory. Records are never marked synced."""

    def __init__(self, records: list[InventoryRecord] | None = None):
        super().__init__()
        self._records: dict[UUID, InventoryRecord] = {
            record.record_id: record for record in records or []
        }

    def add(self, draft: RecordDraft) -> UUID:
        record = record_from_draft(draft, is_synced=False)
        self._records[record.record_id] = record
        logger.info("record_added", record_id=str(record.record_id), store="memory")
        self._notify()
        return record.record_id

    def remove(self, record_id: UUID) -> None:
        if self._records.pop(record_id, None) is None:
            raise RecordNotFoundError(f"Record not found: {record_id}")
        logger.info("record_removed", record_id=str(record_id), store="memory")
        self._notify()

    def list_records(self) -> list[InventoryRecord]:
        return sort_by_recency(self._records.values())

    def get(self, record_id: UUID) -> InventoryRecord:
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFoundError(f"Record not found: {record_id}") from None
