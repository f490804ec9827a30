"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from udi_inventory.config import get_settings
from udi_inventory.core.inventory_service import InventoryService
from udi_inventory.core.models import LocationContext, RecordDraft
from udi_inventory.db.memory import InMemoryRecordStore
from udi_inventory.db.store import record_from_draft


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test without .env files or inherited configuration."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "LOG_LEVEL",
        "DATABASE_HOST",
        "DATABASE_PASSWORD",
        "INVENTORY_OFFLINE_MODE",
        "INVENTORY_RECENT_ITEMS_LIMIT",
        "INVENTORY_DEFAULT_QUANTITY",
        "EXPIRATION_CRITICAL_DAYS",
        "EXPIRATION_WARNING_DAYS",
        "EXPIRATION_SOON_WARNING_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    """Fixed reference time, midnight UTC on 2024-01-01."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def or_suite():
    """Fixture for an operating room location."""
    return LocationContext(
        id="loc-1",
        name="OR Suite 1",
        hospital="St. Jude Medical Center",
        department="Surgery",
        floor="Level 3",
        area="Sterile Zone A",
    )


def make_draft(**overrides) -> RecordDraft:
    """Build a complete, valid draft."""
    values = dict(
        name="Nitrile Exam Gloves, L",
        product_id="00885544112233",
        lot="L8842X",
        expiration_date="2024-06-15",
        location="Central Supply",
        quantity=10,
    )
    values.update(overrides)
    return RecordDraft(**values)


def make_record(name: str, expiration_date: str, added_at: datetime):
    """Build an unsaved record with a fixed added timestamp."""
    return record_from_draft(
        make_draft(name=name, expiration_date=expiration_date),
        is_synced=False,
        added_at=added_at,
    )


@pytest.fixture
def seeded_store():
    """In-memory store holding one record per tier relative to 2024-01-01."""
    return InMemoryRecordStore(
        records=[
            make_record("Saline Flush Syringe", "2023-12-20", datetime(2023, 12, 1, tzinfo=timezone.utc)),
            make_record("IV Catheter 20G", "2024-01-05", datetime(2023, 12, 3, tzinfo=timezone.utc)),
            make_record("Gauze Sponges 4x4", "2024-01-20", datetime(2023, 12, 2, tzinfo=timezone.utc)),
            make_record("Surgical Mask Level 3", "2024-06-01", datetime(2023, 12, 5, tzinfo=timezone.utc)),
            make_record("Alcohol Prep Pads", "2023-11-30", datetime(2023, 12, 4, tzinfo=timezone.utc)),
        ]
    )


@pytest.fixture
def service(seeded_store):
    """Inventory service over the seeded in-memory store."""
    return InventoryService(seeded_store)
