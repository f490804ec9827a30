"""Record store interface shared by the in-memory and Postgres backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Callable
from uuid import UUID, uuid4

import structlog

from udi_inventory.core.models import RecordDraft
from udi_inventory.db.schemas import InventoryRecord, _utc_now

logger = structlog.get_logger()

Subscriber = Callable[[list[InventoryRecord]], None]


class RecordStoreError(Exception):
    """Raised when the record store cannot complete an operation."""

    pass


class RecordNotFoundError(RecordStoreError):
    """Raised when a record id does not exist."""

    pass


def record_from_draft(
    draft: RecordDraft,
    is_synced: bool,
    record_id: UUID | None = None,
    added_at: datetime | None = None,
) -> InventoryRecord:
    """Build an unsaved InventoryRecord from a validated draft."""
    return InventoryRecord(
        record_id=record_id or uuid4(),
        added_at=added_at or _utc_now(),
        name=draft.name,
        product_id=draft.product_id,
        lot=draft.lot,
        serial=draft.serial,
        expiration_date=date.fromisoformat(draft.expiration_date),
        location=draft.location,
        hospital=draft.hospital,
        department=draft.department,
        floor=draft.floor,
        area=draft.area,
        quantity=draft.quantity,
        is_synced=is_synced,
    )


class RecordStore(ABC):
    """Opaque store of inventory records with change notifications."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []

    @abstractmethod
    def add(self, draft: RecordDraft) -> UUID:
        """Store a draft and return the new record id."""

    @abstractmethod
    def remove(self, record_id: UUID) -> None:
        """Delete a record.

        Raises:
            RecordNotFoundError: If no record has this id
        """

    @abstractmethod
    def list_records(self) -> list[InventoryRecord]:
        """Get all records, most recently added first."""

    def get(self, record_id: UUID) -> InventoryRecord:
        """Get a single record.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        for record in self.list_records():
            if record.record_id == record_id:
                return record
        raise RecordNotFoundError(f"Record not found: {record_id}")

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback`` with the current records now and after every change.

        Returns:
            A function that cancels the subscription
        """
        self._subscribers.append(callback)
        callback(self.list_records())

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        if not self._subscribers:
            return
        records = self.list_records()
        for callback in list(self._subscribers):
            callback(records)
